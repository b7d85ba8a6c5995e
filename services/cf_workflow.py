"""Ordered command lists for one platform tenant and its app."""

from __future__ import annotations

import uuid

from commands.models import CancellationToken, Command
from config.controller import AppSettings, CfSettings
from services.cf_commands import CfCommandGenerator


class CfWorkflow:
    """Command sequences for provisioning, exercising and removing one org/space/app."""

    def __init__(
        self,
        cf: CfSettings,
        org: str,
        space: str,
        quota: str,
        app_name: str,
        app: AppSettings,
    ) -> None:
        self._cf = cf
        self.org = org
        self.space = space
        self.quota = quota
        self.app_name = app_name
        self._app = app

    @classmethod
    def create(cls, cf: CfSettings, app: AppSettings) -> "CfWorkflow":
        """Return a workflow with freshly generated, collision-free identities."""

        return cls(
            cf,
            org=f"uptimer-org-{uuid.uuid4()}",
            space=f"uptimer-space-{uuid.uuid4()}",
            quota=f"uptimer-quota-{uuid.uuid4()}",
            app_name=f"uptimer-app-{uuid.uuid4()}",
            app=app,
        )

    @property
    def app_url(self) -> str:
        return f"https://{self.app_name}.{self._cf.app_domain}"

    def _login(self, generator: CfCommandGenerator) -> list[Command]:
        return [
            generator.api(self._cf.api, self._cf.skip_ssl_validation),
            generator.auth(self._cf.admin_user, self._cf.admin_password),
        ]

    def _login_and_target(self, generator: CfCommandGenerator) -> list[Command]:
        return [*self._login(generator), generator.target(self.org, self.space)]

    def setup(self, generator: CfCommandGenerator) -> list[Command]:
        return [
            *self._login(generator),
            generator.create_org(self.org),
            generator.create_space(self.org, self.space),
            generator.create_quota(self.quota),
            generator.set_quota(self.org, self.quota),
            generator.target(self.org, self.space),
        ]

    def push(self, generator: CfCommandGenerator) -> list[Command]:
        return [
            *self._login_and_target(generator),
            generator.push(
                self.app_name,
                self._app.path,
                self._app.buildpack,
                self._app.command,
                self._app.instances,
            ),
        ]

    def delete(self, generator: CfCommandGenerator) -> list[Command]:
        return [*self._login_and_target(generator), generator.delete(self.app_name)]

    def map_route(self, generator: CfCommandGenerator) -> list[Command]:
        return [
            *self._login_and_target(generator),
            generator.map_route(self.app_name, self._cf.tcp_domain, self._cf.available_port),
        ]

    def recent_logs(self, generator: CfCommandGenerator) -> list[Command]:
        return [*self._login_and_target(generator), generator.recent_logs(self.app_name)]

    def stream_logs(self, generator: CfCommandGenerator, cancel: CancellationToken) -> list[Command]:
        return [*self._login_and_target(generator), generator.stream_logs(self.app_name, cancel)]

    def tear_down(self, generator: CfCommandGenerator) -> list[Command]:
        return [
            *self._login(generator),
            generator.delete_org(self.org),
            generator.delete_quota(self.quota),
            generator.logout(),
        ]
