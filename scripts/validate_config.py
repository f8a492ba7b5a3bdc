#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tim_app.config.loader import ConfigLoader, build_format_config
from tim_app.config.validation import ConfigValidator, ValidationError
from tim_app.errors import PatternBuildError
from tim_app.patterns.cache import PatternCache


def validate_overrides(loader: ConfigLoader, overrides: dict) -> List[ValidationError]:
    """Validate the settings file merged with explicit overrides."""
    config = loader.merge_config(overrides)
    return ConfigValidator.validate_config(config)


def main():
    """Main validation function."""
    print("🔍 Validating Time Is Money configuration...")

    loader = ConfigLoader.create()
    all_valid = True

    # Currency formats a user can pick from the options page
    test_formats = {
        "US dollar": {"format": {"symbol": "$", "iso_code": "USD", "thousands": "commas", "decimal": "dot"}},
        "Euro": {"format": {"symbol": "€", "iso_code": "EUR", "thousands": "spacesAndDots", "decimal": "comma"}},
        "Pound": {"format": {"symbol": "£", "iso_code": "GBP", "thousands": "commas", "decimal": "dot"}},
        "Yearly wage": {"wage": {"amount": 52000, "period": "yearly"}},
    }

    for name, overrides in test_formats.items():
        print(f"\n💱 Validating {name}...")

        try:
            errors = validate_overrides(loader, overrides)

            if errors:
                print(f"❌ Found {len(errors)} validation errors:")
                for error in errors:
                    print(f"  • {error.field}: {error.message} (value: {error.value})")
                all_valid = False
                continue

            # The price pattern must also compile
            config = loader.merge_config(overrides)
            PatternCache().build_pattern(build_format_config(config))
            print(f"✅ {name} configuration is valid")

        except PatternBuildError as e:
            print(f"❌ Price pattern for {name} does not build: {e}")
            all_valid = False
        except Exception as e:
            print(f"❌ Error validating {name}: {e}")
            all_valid = False

    # Known-bad overrides must be rejected
    print(f"\n📋 Testing rejection of invalid overrides...")
    bad_overrides = {
        "format": {"thousands": "commas", "decimal": "comma"},
        "wage": {"amount": 0},
    }
    errors = validate_overrides(loader, bad_overrides)
    if len(errors) == 2:
        print(f"✅ Invalid overrides rejected ({len(errors)} errors)")
    else:
        print(f"❌ Expected 2 validation errors, got {len(errors)}")
        all_valid = False

    if all_valid:
        print(f"\n🎉 All configuration validation passed!")
        sys.exit(0)
    else:
        print(f"\n❌ Configuration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
