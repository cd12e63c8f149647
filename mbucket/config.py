"""
Configuration: command line flags, MBUCKET_* environment variables and an
optional profile file, in that order of precedence.

The profile file is Python-format and must be chmod 600 and owned by the user:

    profiles = {
        'dev': {'id': 'AKIA...', 'key': '...', 'url': 'https://s3.example.com',
                'account': 'dev', 'region': 'us-east-1'},
    }
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from mbucket.errors import ConfigError, UsageError

log = logging.getLogger(__name__)

DEFAULT_REGION = 'us-east-1'
CONFIG_NAME = '.mbucket'


@dataclass(frozen=True)
class Config:
    url: str
    account: Optional[str] = None
    key_id: Optional[str] = None
    secret_key: Optional[str] = None
    region: str = DEFAULT_REGION
    timeout: int = 30
    retries: int = 3


def load_profiles(config_path: str) -> Dict[str, Dict[str, str]]:
    """Load the `profiles` mapping from a Python-format profile file"""
    if not os.path.isfile(config_path):
        return {}

    st = os.stat(config_path)
    if st.st_uid != os.getuid():
        raise ConfigError(f"Refusing to read credentials from {config_path}: not owned by current user.")

    mode = st.st_mode & 0o777
    if (mode & 0o077) != 0:
        raise ConfigError(f"Refusing to read credentials from {config_path}: file must have mode 600.")

    local_vars: Dict[str, Any] = {}
    with open(config_path, 'r') as f:
        code = f.read()
    try:
        exec(code, {}, local_vars)
    except Exception as ex:
        raise ConfigError(f"Error loading config from {config_path}: {ex}") from ex
    return local_vars.get('profiles', {})


def default_config_paths() -> List[str]:
    return [
        os.path.join(os.getcwd(), CONFIG_NAME),
        os.path.join(os.path.expanduser('~'), CONFIG_NAME),
    ]


def find_profile(profiles: Dict[str, Dict[str, str]], name: Optional[str]) -> Dict[str, str]:
    """Select a profile by friendly name or by its key id"""
    if not name:
        return {}
    if name in profiles:
        return profiles[name]
    for profile in profiles.values():
        if profile.get('id') == name:
            return profile
    return {}


def load_config(args, environ: Mapping[str, str] = os.environ) -> Config:
    if args.config:
        config_paths = [args.config]
    else:
        config_paths = default_config_paths()

    profiles: Dict[str, Dict[str, str]] = {}
    for p in config_paths:
        if os.path.isfile(p):
            profiles = load_profiles(p)
            log.debug("Loaded profiles from %s", p)
            break
        log.debug("Config file not found at %s", p)

    key_id = args.id or environ.get('MBUCKET_KEY_ID')
    profile = find_profile(profiles, key_id)

    if args.key:
        log.warning("WARNING: Using --key on command line is insecure. Proceeding...")

    def pick(flag: Optional[str], env_name: str, profile_name: str) -> Optional[str]:
        return flag or environ.get(env_name) or profile.get(profile_name)

    url = pick(args.url, 'MBUCKET_URL', 'url')
    if not url:
        raise UsageError('no service URL: use --url, MBUCKET_URL or a profile "url"')

    return Config(
        url=url.rstrip('/'),
        account=pick(args.account, 'MBUCKET_ACCOUNT', 'account'),
        key_id=profile.get('id') or key_id,
        secret_key=args.key or environ.get('MBUCKET_SECRET_KEY') or profile.get('key'),
        region=pick(args.region, 'MBUCKET_REGION', 'region') or DEFAULT_REGION,
        timeout=args.timeout,
        retries=args.retries,
    )
