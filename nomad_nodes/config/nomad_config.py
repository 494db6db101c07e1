"""Configuration du client Nomad.

Ordre de priorité (du plus faible au plus fort): valeurs par défaut,
fichier YAML, variables d'environnement, options de la ligne de commande.
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

import yaml

from nomad_nodes.config.logging_config import get_logger
from nomad_nodes.core.errors import ConfigError

logger = get_logger(__name__)

DEFAULT_NOMAD_ADDR = "http://127.0.0.1:4646"
DEFAULT_TIMEOUT_S = 10.0

CONFIG_FILE_ENV = "NOMAD_NODES_CONFIG"

# Variables d'environnement -> champ de NomadSettings
ENV_VARS = {
    "NOMAD_ADDR": "address",
    "NOMAD_TOKEN": "token",
    "NOMAD_REGION": "region",
    "NOMAD_NAMESPACE": "namespace",
    "NOMAD_CACERT": "ca_cert",
    "NOMAD_CLIENT_CERT": "client_cert",
    "NOMAD_CLIENT_KEY": "client_key",
    "NOMAD_SKIP_VERIFY": "tls_skip_verify",
    "NOMAD_NODES_TIMEOUT": "timeout",
    "NOMAD_NODES_MAX_CONCURRENCY": "max_concurrency",
}


@dataclass(frozen=True)
class NomadSettings:
    address: str = DEFAULT_NOMAD_ADDR
    token: Optional[str] = None
    region: Optional[str] = None
    namespace: Optional[str] = None
    ca_cert: Optional[str] = None
    client_cert: Optional[str] = None
    client_key: Optional[str] = None
    tls_skip_verify: bool = False
    timeout: float = DEFAULT_TIMEOUT_S
    max_concurrency: Optional[int] = None

    def validate(self) -> "NomadSettings":
        """Vérifie la cohérence des valeurs et retourne l'instance."""
        try:
            parsed = urlparse(self.address)
            parsed.port  # lève ValueError si le port est invalide
        except ValueError as e:
            raise ConfigError(f"adresse Nomad invalide: {self.address!r} ({e})")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(f"adresse Nomad invalide: {self.address!r}")
        if self.timeout <= 0:
            raise ConfigError(f"timeout invalide: {self.timeout}")
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise ConfigError(f"max_concurrency invalide: {self.max_concurrency}")
        if bool(self.client_cert) != bool(self.client_key):
            raise ConfigError("client_cert et client_key doivent être fournis ensemble")
        return self


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _coerce(name: str, value: Any) -> Any:
    """Convertit une valeur brute (env ou YAML) vers le type du champ."""
    if value is None or value == "":
        return None
    try:
        if name == "timeout":
            return float(value)
        if name == "max_concurrency":
            return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"valeur invalide pour {name}: {value!r}")
    if name == "tls_skip_verify":
        return _parse_bool(value)
    return str(value)


def _apply(settings: NomadSettings, values: Mapping[str, Any]) -> NomadSettings:
    known = {f.name for f in fields(NomadSettings)}
    changes: Dict[str, Any] = {}
    for name, raw in values.items():
        if name not in known:
            logger.warning(f"Clé de configuration inconnue ignorée: {name}")
            continue
        value = _coerce(name, raw)
        if value is not None:
            changes[name] = value
    return replace(settings, **changes) if changes else settings


def load_yaml_config(path: Path) -> Dict[str, Any]:
    """Charge le fichier YAML de configuration (section racine ou `nomad:`)."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"impossible de lire {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML invalide dans {path}: {e}")
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: un mapping YAML est attendu")
    section = data.get("nomad", data)
    if not isinstance(section, dict):
        raise ConfigError(f"{path}: la section 'nomad' doit être un mapping")
    return section


def settings_from_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    environ = os.environ if environ is None else environ
    return {field: environ[var] for var, field in ENV_VARS.items() if environ.get(var)}


def load_settings(config_file: Optional[str] = None,
                  overrides: Optional[Mapping[str, Any]] = None,
                  environ: Optional[Mapping[str, str]] = None) -> NomadSettings:
    """Construit les paramètres du client à partir de toutes les sources."""
    environ = os.environ if environ is None else environ
    settings = NomadSettings()

    config_file = config_file or environ.get(CONFIG_FILE_ENV)
    if config_file:
        logger.debug(f"Chargement de la configuration depuis {config_file}")
        settings = _apply(settings, load_yaml_config(Path(config_file)))

    settings = _apply(settings, settings_from_env(environ))
    if overrides:
        settings = _apply(settings, overrides)
    return settings.validate()
