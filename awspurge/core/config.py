"""YAML configuration loader with validation."""
import fnmatch
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Dict, Optional, Any

import yaml

from awspurge.core.errors import AccountValidationError, ConfigError, FilterEvaluationError


_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h|d)")
_DURATION_UNITS = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
}


def parse_duration(value: str) -> timedelta:
    """Parse durations like '24h', '1h30m' or '2d'."""
    value = value.strip()
    if not value or _DURATION_PART.sub("", value):
        raise FilterEvaluationError(f"invalid duration {value!r}")
    total = timedelta()
    for amount, unit in _DURATION_PART.findall(value):
        total += float(amount) * _DURATION_UNITS[unit]
    return total


def parse_date(value: str) -> datetime:
    """Parse unix seconds or an ISO-8601 timestamp; naive values are UTC."""
    if value.isdigit():
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise FilterEvaluationError(f"unable to parse time {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_true(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


@dataclass
class Filter:
    """One declarative filter applied to a resource property."""
    property: str = ""
    type: str = "exact"
    value: str = ""
    invert: Any = False

    def is_inverted(self) -> bool:
        return is_true(self.invert)

    def match(self, value: str) -> bool:
        """Evaluate the filter against a property value.

        Raises:
            FilterEvaluationError: unknown filter type or a value that cannot
                be interpreted (bad regex, duration or date).
        """
        if self.type == "exact":
            return self.value == value
        if self.type == "contains":
            return self.value in value
        if self.type == "glob":
            return fnmatch.fnmatchcase(value, self.value)
        if self.type == "regex":
            try:
                return re.search(self.value, value) is not None
            except re.error as e:
                raise FilterEvaluationError(f"invalid regex {self.value!r}: {e}")
        if self.type == "dateOlderThan":
            if value == "":
                return False
            duration = parse_duration(self.value)
            return parse_date(value) + duration > datetime.now(timezone.utc)
        raise FilterEvaluationError(f"unknown filter type {self.type!r}")


@dataclass
class ResourceTypes:
    targets: List[str] = field(default_factory=list)
    excludes: List[str] = field(default_factory=list)
    cloud_control: List[str] = field(default_factory=list)


@dataclass
class FeatureFlags:
    """Opt-in behaviour changes handed to resources after discovery."""
    disable_deletion_protection: Dict[str, bool] = field(default_factory=dict)
    disable_ec2_instance_stop_protection: bool = False


@dataclass
class Preset:
    filters: Dict[str, List[Filter]] = field(default_factory=dict)


@dataclass
class AccountConfig:
    filters: Dict[str, List[Filter]] = field(default_factory=dict)
    resource_types: ResourceTypes = field(default_factory=ResourceTypes)
    presets: List[str] = field(default_factory=list)


@dataclass
class Config:
    """awspurge configuration."""
    regions: List[str] = field(default_factory=list)
    account_blocklist: List[str] = field(default_factory=list)
    resource_types: ResourceTypes = field(default_factory=ResourceTypes)
    feature_flags: FeatureFlags = field(default_factory=FeatureFlags)
    presets: Dict[str, Preset] = field(default_factory=dict)
    accounts: Dict[str, AccountConfig] = field(default_factory=dict)

    def account(self, account_id: str) -> AccountConfig:
        return self.accounts.get(account_id) or AccountConfig()

    def filters(self, account_id: str) -> Dict[str, List[Filter]]:
        """Account filters merged with the filters of its presets."""
        account = self.account(account_id)
        merged = {rtype: list(filters) for rtype, filters in account.filters.items()}
        for name in account.presets:
            preset = self.presets.get(name)
            if preset is None:
                raise ConfigError(f"could not find filter preset {name!r}")
            for rtype, filters in preset.filters.items():
                merged.setdefault(rtype, []).extend(filters)
        return merged

    def validate_account(self, account_id: str, aliases: List[str]) -> None:
        if not self.account_blocklist:
            raise AccountValidationError(
                "The config file contains an empty blocklist. "
                "For safety reasons you need to specify at least one account ID. "
                "This should be your production account.")

        if account_id in self.account_blocklist:
            raise AccountValidationError(
                f"You are trying to purge the account with the ID {account_id}, "
                "but it is blocklisted. Aborting.")

        if not aliases:
            raise AccountValidationError(
                "The specified account doesn't have an alias. "
                "For safety reasons you need to specify an account alias. "
                "Your production account should contain the term 'prod'.")

        for alias in aliases:
            if "prod" in alias.lower():
                raise AccountValidationError(
                    f"You are trying to purge an account with the alias '{alias}', "
                    "but it has the substring 'prod' in it. Aborting.")

        if account_id not in self.accounts:
            raise AccountValidationError(
                f"Your account ID '{account_id}' isn't listed in the config. Aborting.")


@dataclass
class PurgeParameters:
    """Run parameters as given on the command line."""
    config_path: str = ""
    targets: List[str] = field(default_factory=list)
    excludes: List[str] = field(default_factory=list)
    cloud_control: List[str] = field(default_factory=list)
    no_dry_run: bool = False
    force: bool = False
    force_sleep: int = 15
    quiet: bool = False
    max_wait_retries: int = 0


def load_config(path: str) -> Config:
    """Load config from a YAML file.

    Args:
        path: Path to YAML config file.

    Returns:
        Config instance

    Raises:
        FileNotFoundError: If specified path doesn't exist
        ConfigError: If YAML is invalid or has the wrong shape
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML in {path}: {e}")

    return _parse_config(data)


def _parse_filter(raw: Any) -> Filter:
    if isinstance(raw, str):
        return Filter(value=raw)
    if not isinstance(raw, dict):
        raise ConfigError(f"invalid filter {raw!r}")
    # unknown types are loaded as-is and fail when first evaluated
    return Filter(
        property=raw.get("property", ""),
        type=raw.get("type", "exact"),
        value=str(raw.get("value", "")),
        invert=raw.get("invert", False),
    )


def _parse_filters(data: Optional[Dict[str, Any]]) -> Dict[str, List[Filter]]:
    filters = {}
    for rtype, raw_filters in (data or {}).items():
        filters[rtype] = [_parse_filter(raw) for raw in raw_filters or []]
    return filters


def _parse_resource_types(data: Optional[Dict[str, Any]]) -> ResourceTypes:
    data = data or {}
    return ResourceTypes(
        targets=list(data.get("targets") or []),
        excludes=list(data.get("excludes") or []),
        cloud_control=list(data.get("cloud-control") or []),
    )


def _parse_config(data: Dict[str, Any]) -> Config:
    """Parse config dict into Config dataclass."""
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    ff_data = data.get("feature-flags") or {}
    feature_flags = FeatureFlags(
        disable_deletion_protection={
            k: is_true(v) for k, v in (ff_data.get("disable-deletion-protection") or {}).items()
        },
        disable_ec2_instance_stop_protection=is_true(
            ff_data.get("disable-ec2-instance-stop-protection", False)),
    )

    presets = {
        name: Preset(filters=_parse_filters((preset or {}).get("filters")))
        for name, preset in (data.get("presets") or {}).items()
    }

    accounts = {}
    for account_id, account in (data.get("accounts") or {}).items():
        account = account or {}
        accounts[str(account_id)] = AccountConfig(
            filters=_parse_filters(account.get("filters")),
            resource_types=_parse_resource_types(account.get("resource-types")),
            presets=list(account.get("presets") or []),
        )

    return Config(
        regions=list(data.get("regions") or []),
        account_blocklist=[str(a) for a in data.get("account-blocklist") or []],
        resource_types=_parse_resource_types(data.get("resource-types")),
        feature_flags=feature_flags,
        presets=presets,
        accounts=accounts,
    )
