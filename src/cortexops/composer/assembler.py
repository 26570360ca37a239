"""Main playbook (site.yml) assembly.

The plan has three phases, in order:
1. Preparation on ``all``: connectivity and disk checks, package cache refresh.
2. One play per selected role, in selection order, on the role's host group.
3. Closing on ``all``: best-effort cleanup, service snapshot, deployment report.
   Every closing task ignores errors so reporting never fails a deployment.
"""

import logging
from typing import Any, Iterable

import yaml

from cortexops.common.models import Environment, PlannedRole

logger = logging.getLogger(__name__)

UNIVERSAL_GROUP = "all"
DISK_USAGE_LIMIT_PERCENT = 90
PACKAGE_CACHE_VALID_SECONDS = 3600

PREPARATION_PLAY_NAME = "Prepare all hosts"
CLOSING_PLAY_NAME = "Post-deployment checks"
ROLE_PLAY_PREFIX = "Apply role"


class _PlaybookDumper(yaml.SafeDumper):
    """SafeDumper that writes multi-line strings as literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, data: str):
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_PlaybookDumper.add_representer(str, _represent_str)


def role_play_name(name: str) -> str:
    return f"{ROLE_PLAY_PREFIX} {name}"


class PlaybookAssembler:
    """Builds site.yml from an ordered list of planned roles."""

    def __init__(self, app_name: str = "CortexOps"):
        self.app_name = app_name

    def preparation_play(self) -> dict[str, Any]:
        return {
            "name": PREPARATION_PLAY_NAME,
            "hosts": UNIVERSAL_GROUP,
            "become": True,
            "gather_facts": True,
            "pre_tasks": [
                {
                    "name": "Check connectivity",
                    "ansible.builtin.ping": None,
                    "changed_when": False,
                },
                {
                    "name": "Measure root filesystem usage",
                    "ansible.builtin.shell": "df -h / | tail -1 | awk '{print $5}' | sed 's/%//'",
                    "register": "disk_usage",
                    "changed_when": False,
                },
                {
                    "name": "Abort when disk space is insufficient",
                    "ansible.builtin.fail": {
                        "msg": "Insufficient disk space ({{ disk_usage.stdout }}% used)",
                    },
                    "when": f"disk_usage.stdout | int > {DISK_USAGE_LIMIT_PERCENT}",
                },
            ],
            "tasks": [
                {
                    "name": "Refresh package cache",
                    "ansible.builtin.apt": {
                        "update_cache": True,
                        "cache_valid_time": PACKAGE_CACHE_VALID_SECONDS,
                    },
                    "when": 'ansible_os_family == "Debian"',
                },
            ],
        }

    def role_play(self, entry: PlannedRole) -> dict[str, Any]:
        return {
            "name": role_play_name(entry.name),
            "hosts": entry.host_group,
            "become": True,
            "roles": [entry.name],
            "tags": [entry.name],
        }

    def closing_play(self, entries: list[PlannedRole], environment: Environment) -> dict[str, Any]:
        applied = ", ".join(sorted(entry.name for entry in entries))
        report = "\n".join(
            [
                "========================================",
                "DEPLOYMENT REPORT",
                "========================================",
                "Date: {{ ansible_date_time.iso8601 }}",
                f"Environment: {environment.value}",
                "Executed by: {{ ansible_user_id }}",
                "Host: {{ ansible_hostname }}",
                "Distribution: {{ ansible_distribution }} {{ ansible_distribution_version }}",
                f"Roles applied: {applied}",
                "========================================",
                "",
            ]
        )
        return {
            "name": CLOSING_PLAY_NAME,
            "hosts": UNIVERSAL_GROUP,
            "become": True,
            "post_tasks": [
                {
                    "name": "Remove unused packages",
                    "ansible.builtin.apt": {"autoremove": True, "autoclean": True},
                    "when": 'ansible_os_family == "Debian"',
                    "ignore_errors": True,
                },
                {
                    "name": "Collect service status",
                    "ansible.builtin.service_facts": None,
                    "register": "services_state",
                    "ignore_errors": True,
                },
                {
                    "name": "Write deployment report",
                    "ansible.builtin.copy": {
                        "content": report,
                        "dest": "/var/log/ansible-deploy-{{ ansible_date_time.date }}.log",
                        "mode": "0644",
                    },
                    "ignore_errors": True,
                },
            ],
        }

    def assemble(self, ordered_roles: Iterable[PlannedRole], environment: Environment | str) -> str:
        """Render site.yml.

        Args:
            ordered_roles: Planned roles in selection order
            environment: Target environment

        Returns:
            Main playbook YAML text
        """
        environment = Environment.parse(environment)
        entries = list(ordered_roles)

        plays = [self.preparation_play()]
        plays.extend(self.role_play(entry) for entry in entries)
        plays.append(self.closing_play(entries, environment))

        header = (
            f"# Main playbook for the {environment.value} environment\n"
            f"# Generated by {self.app_name}\n"
        )
        body = yaml.dump(
            plays,
            Dumper=_PlaybookDumper,
            explicit_start=True,
            sort_keys=False,
            default_flow_style=False,
            width=120,
        )

        logger.debug(
            f"Assembled playbook: environment={environment.value}, plays={len(plays)}"
        )
        return header + body
