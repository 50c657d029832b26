"""
Credential data model - the fixed set of third-party service fields.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


# Masking rules for display
MASK_THRESHOLD = 8
VISIBLE_PREFIX_LENGTH = 4
VISIBLE_SUFFIX_LENGTH = 4
MASK_REPLACEMENT = "****"
FULL_MASK = "********"


class Service(str, Enum):
    """Third-party services the credentials belong to."""
    BROWSERSTACK = "browserstack"
    JIRA = "jira"
    AZURE = "azure"


@dataclass
class CredentialSet:
    """
    Stored credentials for every integrated service.

    The field set is closed. None means "not set"; an empty string is an
    explicitly cleared value.
    """
    # BrowserStack (test execution)
    browserstack_username: Optional[str] = None
    browserstack_access_key: Optional[str] = None

    # Jira (issue tracker)
    jira_base_url: Optional[str] = None
    jira_email: Optional[str] = None
    jira_api_token: Optional[str] = None

    # Azure DevOps (work tracking)
    azure_org: Optional[str] = None
    azure_project: Optional[str] = None
    azure_pat: Optional[str] = None

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_dict(cls, data: dict) -> CredentialSet:
        """
        Build from a mapping keyed by field name or wire name.

        Unknown keys are dropped.
        """
        known = set(cls.field_names())
        values = {}
        for key, value in data.items():
            name = WIRE_NAMES_REVERSE.get(key, key)
            if name not in known:
                logger.warning(f"Ignoring unknown credential field: {key}")
                continue
            values[name] = value
        return cls(**values)

    def to_dict(self) -> dict[str, Optional[str]]:
        return {name: getattr(self, name) for name in self.field_names()}

    def to_wire(self) -> dict[str, Optional[str]]:
        """Mapping keyed by the camelCase names the UI layer uses."""
        return {WIRE_NAMES[name]: value for name, value in self.to_dict().items()}


@dataclass(frozen=True)
class MaskedField:
    """Display-safe view of one resolved credential."""
    value: str
    masked: str
    exists: bool

    def to_dict(self) -> dict:
        return {"value": self.value, "masked": self.masked, "exists": self.exists}


WIRE_NAMES: dict[str, str] = {
    "browserstack_username": "browserstackUsername",
    "browserstack_access_key": "browserstackAccessKey",
    "jira_base_url": "jiraBaseUrl",
    "jira_email": "jiraEmail",
    "jira_api_token": "jiraApiToken",
    "azure_org": "azureOrg",
    "azure_project": "azureProject",
    "azure_pat": "azurePat",
}
WIRE_NAMES_REVERSE: dict[str, str] = {v: k for k, v in WIRE_NAMES.items()}

# Developer fallbacks, read from the process environment
ENV_VARS: dict[str, str] = {
    "browserstack_username": "AXIS_BROWSERSTACK_USERNAME",
    "browserstack_access_key": "AXIS_BROWSERSTACK_ACCESS_KEY",
    "jira_base_url": "AXIS_JIRA_BASE_URL",
    "jira_email": "AXIS_JIRA_EMAIL",
    "jira_api_token": "AXIS_JIRA_API_TOKEN",
    "azure_org": "AXIS_AZURE_ORG",
    "azure_project": "AXIS_AZURE_PROJECT",
    "azure_pat": "AXIS_AZURE_PAT",
}

# Fields that must all be non-empty for a service to be usable
SERVICE_FIELDS: dict[Service, tuple[str, ...]] = {
    Service.BROWSERSTACK: ("browserstack_username", "browserstack_access_key"),
    Service.JIRA: ("jira_base_url", "jira_email", "jira_api_token"),
    Service.AZURE: ("azure_org", "azure_project", "azure_pat"),
}

# Not secret - shown as-is
PLAIN_FIELDS: frozenset[str] = frozenset({"jira_base_url", "azure_org", "azure_project"})
