"""Environment-name resolution adapter.

Purpose
-------
Decide which named layer applies to the running process. Implements the
:class:`smconfig.application.ports.EnvironmentResolver` port.

Precedence (first match wins)
-----------------------------
1. The explicit ``env`` argument, when non-empty.
2. The process variable named by ``environment_variable`` (``APP_ENV`` by
   default), taken verbatim.
3. The ``hostnames`` table: environments in declared order, rules in declared
   order; strings match the hostname with ``*`` as a wildcard, compiled
   patterns match when ``pattern.search(hostname)`` succeeds.
4. ``"default"``.

Malformed hostname entries (non-list rule lists, falsy rules, other value
types) are skipped, never raised.
"""

from __future__ import annotations

import os
import re
import socket
from collections.abc import Mapping
from typing import Any

from ...domain.config import DEFAULT_ENVIRONMENT
from ...observability import log_debug

#: Process variable consulted when no explicit environment is passed.
DEFAULT_ENVIRONMENT_VARIABLE = "APP_ENV"


class DefaultEnvironmentResolver:
    """Resolve the environment name from explicit input, a variable, or the hostname."""

    def __init__(
        self,
        *,
        environ: Mapping[str, str] | None = None,
        hostname: str | None = None,
        environment_variable: str = DEFAULT_ENVIRONMENT_VARIABLE,
    ) -> None:
        """Store the external signals used during resolution.

        Parameters
        ----------
        environ:
            Process-variable snapshot. Defaults to :data:`os.environ`.
        hostname:
            Machine hostname. Defaults to :func:`socket.gethostname`, looked up
            only when the hostname table is actually consulted.
        environment_variable:
            Name of the process variable that selects the environment.
        """

        self._environ = os.environ if environ is None else environ
        self._hostname = hostname
        self.environment_variable = environment_variable
        self.last_rule: str | None = None

    @property
    def hostname(self) -> str:
        if self._hostname is None:
            self._hostname = socket.gethostname()
        return self._hostname

    def resolve(self, env: Any = None, hostnames: Any = None) -> str:
        """Return the environment name for *env* and the *hostnames* table.

        Side Effects
        ------------
        Sets :attr:`last_rule` to ``"explicit"``, ``"variable"``, ``"hostname"``,
        or ``"fallback"`` and emits an ``environment_resolved`` debug event.

        Examples
        --------
        >>> resolver = DefaultEnvironmentResolver(environ={}, hostname="db1.example.com")
        >>> resolver.resolve(None, {"prod": ["*.example.com"]})
        'prod'
        >>> resolver.resolve("staging", {"prod": ["*.example.com"]})
        'staging'
        >>> DefaultEnvironmentResolver(environ={"APP_ENV": "qa"}, hostname="x").resolve()
        'qa'
        """

        explicit = "" if env is None else str(env).strip()
        if explicit:
            return self._decided(explicit, "explicit")

        variable = self._environ.get(self.environment_variable)
        if variable:
            return self._decided(variable, "variable")

        if isinstance(hostnames, Mapping):
            matched = self._match_hostname(hostnames)
            if matched is not None:
                return self._decided(matched, "hostname")

        return self._decided(DEFAULT_ENVIRONMENT, "fallback")

    def _match_hostname(self, hostnames: Mapping[Any, Any]) -> str | None:
        """Return the first environment whose rule list matches the hostname."""

        for environment, rules in hostnames.items():
            if not isinstance(rules, (list, tuple)):
                log_debug("hostname_rule_skipped", layer="hostnames", path=None, environment=str(environment))
                continue
            for rule in rules:
                if not rule:
                    continue
                if isinstance(rule, str):
                    if wildcard_match(rule, self.hostname):
                        return str(environment)
                elif isinstance(rule, re.Pattern):
                    if rule.search(self.hostname):
                        return str(environment)
                else:
                    log_debug("hostname_rule_skipped", layer="hostnames", path=None, environment=str(environment))
        return None

    def _decided(self, environment: str, rule: str) -> str:
        self.last_rule = rule
        log_debug("environment_resolved", layer="environment", path=None, environment=environment, rule=rule)
        return environment


def get_environment(
    env: Any = None,
    hostnames: Any = None,
    *,
    environ: Mapping[str, str] | None = None,
    hostname: str | None = None,
    environment_variable: str = DEFAULT_ENVIRONMENT_VARIABLE,
) -> str:
    """Functional shortcut around :class:`DefaultEnvironmentResolver`.

    >>> get_environment(None, {"dev": [None, 42, "laptop"]}, environ={}, hostname="laptop")
    'dev'
    """

    resolver = DefaultEnvironmentResolver(
        environ=environ,
        hostname=hostname,
        environment_variable=environment_variable,
    )
    return resolver.resolve(env, hostnames)


def wildcard_match(pattern: str, value: str) -> bool:
    """Return ``True`` when *value* matches *pattern* in full, ``*`` matching any run.

    Examples
    --------
    >>> wildcard_match("*.example.com", "db1.example.com")
    True
    >>> wildcard_match("*.example.com", "example.com")
    False
    >>> wildcard_match("web?", "web?")
    True
    """

    regex = ".*".join(re.escape(part) for part in pattern.split("*"))
    return re.fullmatch(regex, value, flags=re.DOTALL) is not None
