"""Generate ``cf`` CLI command descriptors."""

from __future__ import annotations

from commands.models import CancellationToken, Command

CF_PROGRAM = "cf"


class CfCommandGenerator:
    """Build ``cf`` commands that share one private ``CF_HOME``.

    Probes running concurrently each get their own generator so their CLI
    sessions never overwrite each other's targets or tokens.
    """

    def __init__(self, cf_home: str) -> None:
        self._cf_home = cf_home

    @property
    def cf_home(self) -> str:
        return self._cf_home

    def _cf(self, *args: str, cancel: CancellationToken | None = None) -> Command:
        return Command(CF_PROGRAM, args, env={"CF_HOME": self._cf_home}, cancel=cancel)

    def api(self, url: str, skip_ssl_validation: bool = True) -> Command:
        args = ["api", url]
        if skip_ssl_validation:
            args.append("--skip-ssl-validation")
        return self._cf(*args)

    def auth(self, username: str, password: str) -> Command:
        return self._cf("auth", username, password)

    def create_org(self, org: str) -> Command:
        return self._cf("create-org", org)

    def create_space(self, org: str, space: str) -> Command:
        return self._cf("create-space", space, "-o", org)

    def target(self, org: str, space: str) -> Command:
        return self._cf("target", "-o", org, "-s", space)

    def create_quota(self, quota: str) -> Command:
        return self._cf(
            "create-quota", quota,
            "-m", "10G",
            "-r", "1000",
            "-s", "100",
            "--reserved-route-ports", "10",
            "--allow-paid-service-plans",
        )

    def set_quota(self, org: str, quota: str) -> Command:
        return self._cf("set-quota", org, quota)

    def push(self, app: str, path: str, buildpack: str, command: str, instances: int) -> Command:
        return self._cf(
            "push", app,
            "-p", path,
            "-b", buildpack,
            "-c", command,
            "-i", str(instances),
        )

    def delete(self, app: str) -> Command:
        return self._cf("delete", app, "-f", "-r")

    def recent_logs(self, app: str) -> Command:
        return self._cf("logs", app, "--recent")

    def stream_logs(self, app: str, cancel: CancellationToken) -> Command:
        return self._cf("logs", app, cancel=cancel)

    def map_route(self, app: str, domain: str, port: int) -> Command:
        return self._cf("map-route", app, domain, "--port", str(port))

    def delete_org(self, org: str) -> Command:
        return self._cf("delete-org", org, "-f")

    def delete_quota(self, quota: str) -> Command:
        return self._cf("delete-quota", quota, "-f")

    def logout(self) -> Command:
        return self._cf("logout")
