import os
import typing

import yaml

from dicenotation.roll import IllegalValue

DEFAULT_SETTINGS_FILE = os.path.join(os.path.dirname(__file__), "settings.default.yaml")


def _read(path: str) -> typing.Dict[str, typing.Any]:
    with open(path) as f:
        result = yaml.safe_load(f)
    if result is None:
        return {}
    if not isinstance(result, dict):
        raise IllegalValue("settings file %s must hold a mapping" % path)
    return result


def load_settings(path: typing.Optional[str] = None) -> typing.Dict[str, typing.Any]:
    settings = _read(DEFAULT_SETTINGS_FILE)
    if path is None:
        return settings

    overrides = _read(path)
    unknown = set(overrides) - set(settings)
    if unknown:
        raise IllegalValue("unknown settings: %s" % ", ".join(sorted(unknown)))
    for key in ("max_explosions", "default_sides"):
        if key in overrides and not isinstance(overrides[key], int):
            raise IllegalValue("setting %s must be an integer" % key)
    settings.update(overrides)
    return settings
