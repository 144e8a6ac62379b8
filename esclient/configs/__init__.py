"""Configuration for esclient"""

from pathlib import Path

from dynaconf import Dynaconf, Validator

# Validators for esclient settings.
_validators = [
    Validator("elasticsearch.host", is_type_of=str, must_exist=True),
    Validator("elasticsearch.port", is_type_of=int, gte=1, lte=65535, must_exist=True),
    Validator("elasticsearch.scheme", is_in=["http", "https"]),
    Validator(
        "elasticsearch.connect_timeout_sec",
        "elasticsearch.request_timeout_sec",
        is_type_of=float,
        gt=0,
    ),
    # Upper bound of a single bulk request body, measured on the serialized documents.
    Validator("bulk.max_bytes", is_type_of=int, gt=0, must_exist=True),
    Validator("logging.format", is_in=["mozlog", "pretty"]),
    Validator("logging.level", is_in=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    Validator("logging.can_propagate", is_type_of=bool),
]

# `root_path` = The directory holding the TOML files, anchored to this package so the
#   settings load whatever the current working directory is.
# `envvar_prefix` = Export envvars with `export ESCLIENT_FOO=bar`.
# `settings_files` = Load these files in the order.
# `environments` = Enable layered environments such as `development`, `production`, `testing` etc.
# `env_switcher` = Switch environments by `export ESCLIENT_ENV=production`. Default: `development`.
# `merge_enabled` = Merge nested tables of an environment into the defaults instead of replacing them.
# `validators` = Define validators for esclient settings.

settings = Dynaconf(
    root_path=str(Path(__file__).parent),
    envvar_prefix="ESCLIENT",
    settings_files=[
        "default.toml",
        "development.toml",
        "production.toml",
        "testing.toml",
    ],
    environments=True,
    env_switcher="ESCLIENT_ENV",
    merge_enabled=True,
    validators=_validators,
)
