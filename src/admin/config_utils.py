"""Configuration utilities for the IPTV catalog."""

import secrets
from pathlib import Path

from pydantic import ValidationError

EXAMPLE_CONFIG = """\
# IPTV Catalog Configuration

service:
  name: "IPTV Catalog"
  log_level: INFO

database:
  # null means ~/.local/share/iptv/catalog.db
  path: null

auth:
  issuer: IPTVPlayer
  audience: IPTVPlayerClients
  expiration_minutes: 1440

recommendations:
  default_count: 10
  history_limit: 50
"""

EXAMPLE_SECRETS = """\
# IPTV Catalog Secrets
# This file contains sensitive credentials - DO NOT COMMIT TO GIT
# Add this file to .gitignore

jwt:
  # At least 32 characters; generated by 'iptv config init'
  secret_key: "{secret_key}"
"""


def generate_secret_key() -> str:
    """A random URL-safe signing secret."""
    return secrets.token_urlsafe(48)


def validate_config(config_dir: str | None = None) -> bool:
    """Validate configuration files.

    Args:
        config_dir: Path to config directory

    Returns:
        True if valid, False otherwise
    """
    from config import build_auth_settings, find_config_dir, load_config, load_secrets

    if config_dir:
        cfg_path = Path(config_dir)
    else:
        cfg_path = find_config_dir()

    print(f"Validating configuration in: {cfg_path}")
    print()

    errors = []
    warnings = []
    config = None
    loaded_secrets = None

    config_file = cfg_path / "config.yaml"
    if not config_file.exists():
        warnings.append(f"config.yaml not found at {config_file}, using defaults")
        print("⚠ config.yaml not found (defaults apply)")

    try:
        config = load_config(cfg_path)
        print("✓ config.yaml is valid")
        print(f"  Service: {config.service.name}")
        print(f"  Database: {config.database.path or 'default location'}")
        print(f"  Token lifetime: {config.auth.expiration_minutes} minutes")
    except (ValidationError, ValueError, OSError) as e:
        errors.append(f"Failed to parse config.yaml: {e}")

    print()

    secrets_file = cfg_path / "secrets.yaml"
    if not secrets_file.exists():
        errors.append(f"secrets.yaml not found at {secrets_file}")
    else:
        print("✓ Found secrets.yaml")
        try:
            loaded_secrets = load_secrets(cfg_path)
            print("✓ secrets.yaml is valid YAML")
        except (ValidationError, ValueError, OSError) as e:
            errors.append(f"Failed to parse secrets.yaml: {e}")

    if config is not None and loaded_secrets is not None:
        try:
            build_auth_settings(config, loaded_secrets)
            print("✓ JWT signing settings are valid")
        except ValidationError as e:
            errors.append(f"Invalid JWT settings: {e.errors()[0]['msg']}")

    print()

    if errors:
        print("Errors:")
        for e in errors:
            print(f"  ✗ {e}")
        print()

    if warnings:
        print("Warnings:")
        for w in warnings:
            print(f"  ⚠ {w}")
        print()

    if not errors:
        print("✓ Configuration is valid")
        return True
    else:
        print("✗ Configuration has errors")
        return False


def init_config(config_dir: str = "./config") -> None:
    """Create example configuration files.

    Existing files are left untouched.

    Args:
        config_dir: Path to config directory
    """
    cfg_path = Path(config_dir)

    print(f"Initializing configuration in: {cfg_path}")
    print()

    if not cfg_path.exists():
        cfg_path.mkdir(parents=True)
        print(f"✓ Created directory: {cfg_path}")

    config_file = cfg_path / "config.yaml"
    if config_file.exists():
        print("⚠ config.yaml already exists, skipping")
    else:
        config_file.write_text(EXAMPLE_CONFIG)
        print("✓ Created config.yaml")

    secrets_file = cfg_path / "secrets.yaml"
    if secrets_file.exists():
        print("⚠ secrets.yaml already exists, skipping")
    else:
        secrets_file.write_text(EXAMPLE_SECRETS.format(secret_key=generate_secret_key()))
        secrets_file.chmod(0o600)
        print("✓ Created secrets.yaml with a new JWT secret")

    gitignore = cfg_path.parent / ".gitignore"
    secrets_pattern = "config/secrets.yaml"

    if gitignore.exists():
        content = gitignore.read_text()
        if "secrets.yaml" not in content:
            print()
            print("⚠ Warning: secrets.yaml should be in .gitignore")
            print(f"  Add this line to .gitignore: {secrets_pattern}")
    else:
        print()
        print("⚠ Warning: No .gitignore found")
        print(f"  Create one and add: {secrets_pattern}")

    print()
    print("Next steps:")
    print("  1. Review config/config.yaml")
    print("  2. Run 'iptv config validate' to check your config")
    print("  3. Run 'iptv seed' to load demo data")
    print("  4. Run 'iptv serve' to start the MCP server")
