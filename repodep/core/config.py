"""
Configuration for repodep.

Sources, in the order the CLI consults them:
    1. --baseurl on the command line
    2. --repo-file / --repos-dir: yum/dnf .repo files
    3. The YAML config file (~/.config/repodep/config.yaml or $REPODEP_CONFIG)

config.yaml format:
    repo:
      name: fedora
      baseurl: https://dl.fedoraproject.org/pub/fedora/linux/releases/$releasever/Everything/$basearch/os/
    repos_dir: /etc/yum.repos.d   # optional, used when no repo is given
    vars:                         # optional, extra or overriding yum variables
      releasever: "39"
    timeout: 30                   # optional, seconds

Repository names and base URLs may contain yum variables ($basearch, $arch,
$releasever, or any variable defined in /etc/dnf/vars and /etc/yum/vars).
"""

import configparser
import logging
import os
import platform
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "REPODEP_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "repodep" / "config.yaml"
DEFAULT_REPOS_DIR = Path("/etc/yum.repos.d")
VARS_DIRS = (Path("/etc/dnf/vars"), Path("/etc/yum/vars"))
OS_RELEASE = Path("/etc/os-release")
DEFAULT_TIMEOUT = 30

# rpm arch -> yum basearch
BASEARCH_MAP = {
    'i386': 'i386', 'i486': 'i386', 'i586': 'i386', 'i686': 'i386',
    'athlon': 'i386', 'geode': 'i386',
    'x86_64': 'x86_64', 'amd64': 'x86_64', 'ia32e': 'x86_64',
    'aarch64': 'aarch64', 'arm64': 'aarch64',
    'armv7l': 'armhfp', 'armv7hl': 'armhfp', 'armv7hnl': 'armhfp',
    'ppc64le': 'ppc64le', 'ppc64': 'ppc64',
    's390x': 's390x',
    'riscv64': 'riscv64',
    'loongarch64': 'loongarch64',
}

_VAR_RE = re.compile(r'\$(?:\{(\w+)\}|(\w+))')


class ConfigError(Exception):
    """Missing or invalid configuration."""
    pass


@dataclass
class RepoConfig:
    """One repository definition."""
    id: str
    name: str
    baseurl: str
    enabled: bool = True


@dataclass
class Config:
    """Contents of the YAML config file."""
    repo: Optional[RepoConfig] = None
    repos_dir: Optional[Path] = None
    vars: Dict[str, str] = field(default_factory=dict)
    timeout: int = DEFAULT_TIMEOUT

    def get_repo_baseurl(self) -> Optional[str]:
        return self.repo.baseurl if self.repo else None


def get_config_path() -> Path:
    """Config file location, honouring $REPODEP_CONFIG."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(path: Path = None) -> Config:
    """Load the YAML config file.

    Args:
        path: Explicit config file; it must exist. When None the default
            location is used and a missing file gives an empty Config.

    Raises:
        ConfigError: File missing (explicit path only), unreadable or malformed
    """
    explicit = path is not None
    path = Path(path).expanduser() if explicit else get_config_path()

    if not path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        logger.debug(f"No config file at {path}")
        return Config()

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")

    if data is None:
        return Config()
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    config = Config()

    repo = data.get('repo')
    if repo is not None:
        if not isinstance(repo, dict) or not repo.get('baseurl'):
            raise ConfigError(f"{path}: 'repo' needs a 'baseurl'")
        repo_id = str(repo.get('id') or repo.get('name') or 'repo')
        config.repo = RepoConfig(
            id=repo_id,
            name=str(repo.get('name') or repo_id),
            baseurl=str(repo['baseurl']),
        )

    if data.get('repos_dir'):
        config.repos_dir = Path(str(data['repos_dir'])).expanduser()

    variables = data.get('vars') or {}
    if not isinstance(variables, dict):
        raise ConfigError(f"{path}: 'vars' must be a mapping")
    config.vars = {str(k): str(v) for k, v in variables.items()}

    if 'timeout' in data:
        try:
            config.timeout = int(data['timeout'])
        except (TypeError, ValueError):
            raise ConfigError(f"{path}: 'timeout' must be an integer")

    logger.debug(f"Loaded config from {path}")
    return config


# =============================================================================
# Yum variables
# =============================================================================

def get_arch() -> str:
    """Machine architecture as rpm names it."""
    return platform.machine() or 'noarch'


def get_basearch(arch: str) -> str:
    """Map an architecture to its yum basearch."""
    return BASEARCH_MAP.get(arch, arch)


def get_releasever(os_release: Path = OS_RELEASE) -> Optional[str]:
    """Read VERSION_ID from os-release."""
    try:
        with open(os_release) as f:
            for line in f:
                line = line.strip()
                if line.startswith('VERSION_ID='):
                    return line.split('=', 1)[1].strip().strip('"\'') or None
    except OSError:
        return None
    return None


def read_vars_dirs(dirs: Iterable[Path] = VARS_DIRS) -> Dict[str, str]:
    """Read variable files (one variable per file, first line is the value).

    Earlier directories win.
    """
    variables = {}
    for vars_dir in dirs:
        if not vars_dir.is_dir():
            continue
        for var_file in sorted(vars_dir.iterdir()):
            if not var_file.is_file() or var_file.name in variables:
                continue
            try:
                lines = var_file.read_text().splitlines()
            except OSError as e:
                logger.warning(f"Cannot read yum variable {var_file}: {e}")
                continue
            variables[var_file.name] = lines[0].strip() if lines else ''
    return variables


class YumVariables:
    """Values of $arch, $basearch, $releasever and custom yum variables."""

    def __init__(self, overrides: Dict[str, str] = None,
                 vars_dirs: Iterable[Path] = VARS_DIRS,
                 os_release: Path = OS_RELEASE):
        arch = get_arch()
        values = {'arch': arch, 'basearch': get_basearch(arch)}
        releasever = get_releasever(os_release)
        if releasever:
            values['releasever'] = releasever
        values.update(read_vars_dirs(vars_dirs))
        values.update(overrides or {})
        self.values = values

    def substitute(self, text: str) -> str:
        """Replace $name and ${name} occurrences.

        Raises:
            ConfigError: A variable has no known value
        """
        def replace(match):
            name = match.group(1) or match.group(2)
            if name not in self.values:
                raise ConfigError(f"Unknown yum variable ${name} in '{text}'")
            return self.values[name]

        return _VAR_RE.sub(replace, text)


# =============================================================================
# .repo files
# =============================================================================

def _is_enabled(value: Optional[str]) -> bool:
    if value is None:
        return True
    return value.strip().lower() in ('1', 'yes', 'true', 'on')


def parse_repo_file(path: Path, variables: YumVariables = None) -> List[RepoConfig]:
    """Parse a .repo file and return its repositories.

    Repositories without baseurl (mirrorlist or metalink only) are skipped.
    Disabled repositories are returned with enabled=False.

    Raises:
        ConfigError: File unreadable or malformed, or unknown variable
    """
    if variables is None:
        variables = YumVariables()

    parser = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        with open(path) as f:
            parser.read_file(f, source=str(path))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}")
    except configparser.Error as e:
        raise ConfigError(f"Invalid repo file {path}: {e}")

    repos = []
    for section in parser.sections():
        options = parser[section]

        baseurls = (options.get('baseurl') or '').split()
        if not baseurls:
            if options.get('mirrorlist') or options.get('metalink'):
                logger.warning(f"{path}: repo {section} has only a mirrorlist/metalink, skipped")
            else:
                logger.warning(f"{path}: repo {section} has no baseurl, skipped")
            continue

        repos.append(RepoConfig(
            id=section,
            name=variables.substitute(options.get('name') or section),
            baseurl=variables.substitute(baseurls[0]),
            enabled=_is_enabled(options.get('enabled')),
        ))

    return repos


def repos_from_dir(path: Path, variables: YumVariables = None) -> List[RepoConfig]:
    """Collect the repositories of every *.repo file in a directory, sorted by file name."""
    path = Path(path)
    if not path.is_dir():
        raise ConfigError(f"Not a directory: {path}")
    if variables is None:
        variables = YumVariables()

    repos = []
    for repo_file in sorted(path.glob('*.repo')):
        repos.extend(parse_repo_file(repo_file, variables))
    return repos
