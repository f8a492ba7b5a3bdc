"""Configuration validation utilities."""

import re
from dataclasses import dataclass
from typing import Any

from ..data.models import VALID_DECIMALS, VALID_THOUSANDS, DirectionMode, WagePeriod

_ISO_CODE = re.compile(r"^[A-Z]{3}$")
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_format_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate currency format parameters."""
        errors = []

        symbol = params.get("symbol", "")
        iso_code = params.get("iso_code", "")
        if not symbol and not iso_code:
            errors.append(ValidationError(
                field="symbol",
                message="A currency symbol or ISO code is required",
                value=symbol
            ))

        if iso_code and (not isinstance(iso_code, str) or not _ISO_CODE.match(iso_code)):
            errors.append(ValidationError(
                field="iso_code",
                message="Must be a three-letter uppercase ISO 4217 code",
                value=iso_code
            ))

        # Empty separators are filled in from the page text at match time
        thousands = params.get("thousands")
        if thousands and thousands not in VALID_THOUSANDS:
            errors.append(ValidationError(
                field="thousands",
                message=f"Must be one of {', '.join(VALID_THOUSANDS)}",
                value=thousands
            ))

        decimal = params.get("decimal")
        if decimal and decimal not in VALID_DECIMALS:
            errors.append(ValidationError(
                field="decimal",
                message=f"Must be one of {', '.join(VALID_DECIMALS)}",
                value=decimal
            ))

        if (thousands, decimal) in (("commas", "comma"), ("spacesAndDots", "dot")):
            errors.append(ValidationError(
                field="decimal",
                message="Thousands and decimal delimiters overlap",
                value=decimal
            ))

        if "direction" in params:
            value = params["direction"]
            if value not in {d.value for d in DirectionMode}:
                errors.append(ValidationError(
                    field="direction",
                    message="Must be 'forward' or 'reverse'",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_wage_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate wage parameters."""
        errors = []

        if "amount" in params:
            value = params["amount"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="amount",
                    message="Must be a positive number",
                    value=value
                ))

        if "currency" in params:
            value = params["currency"]
            if not isinstance(value, str) or not _ISO_CODE.match(value):
                errors.append(ValidationError(
                    field="currency",
                    message="Must be a three-letter uppercase ISO 4217 code",
                    value=value
                ))

        if "period" in params:
            value = params["period"]
            if value not in {p.value for p in WagePeriod}:
                errors.append(ValidationError(
                    field="period",
                    message="Must be 'hourly' or 'yearly'",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_scanner_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate scanner parameters."""
        errors = []

        if "debounce_interval_ms" in params:
            value = params["debounce_interval_ms"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(ValidationError(
                    field="debounce_interval_ms",
                    message="Must be a non-negative integer",
                    value=value
                ))

        for field_name in ("max_pending_nodes", "max_text_length"):
            if field_name in params:
                value = params[field_name]
                if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                    errors.append(ValidationError(
                        field=field_name,
                        message="Must be a positive integer",
                        value=value
                    ))

        if "initial_scan" in params:
            value = params["initial_scan"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="initial_scan",
                    message="Must be a boolean",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_extraction_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate extraction parameters."""
        errors = []

        for field_name in ("enable_site_handlers", "enable_structural"):
            if field_name in params and not isinstance(params[field_name], bool):
                errors.append(ValidationError(
                    field=field_name,
                    message="Must be a boolean",
                    value=params[field_name]
                ))

        domain = params.get("site_domain")
        if domain is not None and (not isinstance(domain, str) or not domain.strip()):
            errors.append(ValidationError(
                field="site_domain",
                message="Must be a non-empty domain name or null",
                value=domain
            ))

        return errors

    @staticmethod
    def validate_exchange_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate exchange rate parameters."""
        errors = []

        rates = params.get("rates", {})
        if not isinstance(rates, dict):
            return [ValidationError(field="rates", message="Must be a mapping of codes to rates", value=rates)]

        for code, rate in rates.items():
            if not _is_number(rate) or rate <= 0:
                errors.append(ValidationError(
                    field=f"rates.{code}",
                    message="Must be a positive number",
                    value=rate
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate log output parameters."""
        errors = []

        level = params.get("level", "INFO")
        if not isinstance(level, str) or level.upper() not in _LOG_LEVELS:
            errors.append(ValidationError(
                field="level",
                message=f"Must be one of {sorted(_LOG_LEVELS)}",
                value=level
            ))

        for flag in ("format_json", "include_caller"):
            if flag in params and not isinstance(params[flag], bool):
                errors.append(ValidationError(field=flag, message="Must be a boolean", value=params[flag]))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "format" in config:
            errors.extend(ConfigValidator.validate_format_params(config["format"]))

        if "wage" in config:
            errors.extend(ConfigValidator.validate_wage_params(config["wage"]))

        if "scanner" in config:
            errors.extend(ConfigValidator.validate_scanner_params(config["scanner"]))

        if "extraction" in config:
            errors.extend(ConfigValidator.validate_extraction_params(config["extraction"]))

        if "exchange" in config:
            errors.extend(ConfigValidator.validate_exchange_params(config["exchange"]))

        if "logging" in config:
            errors.extend(ConfigValidator.validate_logging_params(config["logging"]))

        return errors
