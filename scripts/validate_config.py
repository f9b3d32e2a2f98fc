#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import Optional

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ledger_app.config.loader import ConfigLoader
from ledger_app.config.validation import ConfigValidator, ValidationError


def validate_ledger_config(config_dir: Optional[Path] = None,
                           overrides: Optional[dict] = None) -> list[ValidationError]:
    """Validate the merged ledger configuration."""
    loader = ConfigLoader.create(config_dir)
    config = loader.merge_config(overrides)
    return ConfigValidator.validate_config(config)


def main():
    """Main validation function."""
    config_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    print("🔍 Validating ledger configuration...")

    all_valid = True

    print("\n📦 Validating ledger.yaml...")
    try:
        errors = validate_ledger_config(config_dir)
        if errors:
            print(f"❌ Found {len(errors)} validation errors:")
            for error in errors:
                print(f"  • {error.field}: {error.message} (value: {error.value})")
            all_valid = False
        else:
            print("✅ ledger.yaml is valid")
    except Exception as e:
        print(f"❌ Error loading configuration: {e}")
        all_valid = False

    # Runtime overrides used by tests and local runs
    print("\n📋 Testing runtime overrides...")
    test_overrides = {
        "store": {"cooldown_seconds": 0},
        "notifications": {"max_workers": 0},
    }

    try:
        errors = validate_ledger_config(config_dir, test_overrides)
        if errors:
            print("❌ Override validation failed:")
            for error in errors:
                print(f"  • {error.field}: {error.message}")
            all_valid = False
        else:
            print("✅ Override validation passed")
    except Exception as e:
        print(f"❌ Error testing overrides: {e}")
        all_valid = False

    if all_valid:
        print("\n🎉 All configuration validation passed!")
        sys.exit(0)
    else:
        print("\n❌ Configuration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
