import typing
from urllib import parse

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, JsonConfigSettingsSource

from ics.models import ImageFormat

_format_values: dict[str, ImageFormat] = {f.value: f for f in ImageFormat}


def _parse_value(value: str) -> typing.Any:
    lowered = value.lower()
    if lowered in ('true', 'false'):
        return lowered == 'true'

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        return value


def _parse_encoder_params(s: str) -> dict[str, typing.Any]:
    """ Converts string like 'quality=80&optimize=true' into Pillow save arguments """
    raw_values = parse.parse_qs(s, strict_parsing=True)
    return {k: _parse_value(v[0]) for k, v in raw_values.items()}


def _parse_format_key(key: str) -> ImageFormat:
    image_format = ImageFormat.from_extension(key) or _format_values.get(key, None)
    if image_format is None:
        raise ValueError(f"Encoder params were configured for unknown format '{key}'")
    return image_format


class AppSettings(BaseSettings):
    """ Application settings """

    log_level: str = 'info'
    """ Logging level. Options: critical, error, warning, info, debug, trace. Default: info """

    log_fmt: str = "{time} | {level}: {extra} {message}"
    """ Logging message format """

    max_input_bytes: int = 20 * 1024 * 1024
    """ Max size of the image to convert, 20 MiB by default """

    encoder_params: dict[ImageFormat, dict[str, typing.Any]] | None = None
    """ Pillow save arguments per output format, None to use codec defaults """

    uvicorn: dict[str, typing.Any] = Field(default_factory=dict[str, typing.Any])
    """ uvicorn specific settings """

    model_config = SettingsConfigDict(env_file=".env", nested_model_default_partial_update=True,
                                      env_nested_delimiter="__", extra='ignore', case_sensitive=False,
                                      json_file="config.json", enable_decoding=False)

    # noinspection PyNestedDecorators
    @model_validator(mode='before')
    @classmethod
    def before_validator(cls, data: typing.Any) -> typing.Any:
        result = data
        if isinstance(data, dict):
            raw_dict = dict(data)

            uvicorn_settings = raw_dict.setdefault('uvicorn', dict[str, typing.Any]())
            uvicorn_settings.setdefault('host', '0.0.0.0')
            uvicorn_settings.setdefault('port', 80)
            uvicorn_settings.setdefault('proxy_headers', True)

            if isinstance(raw_dict.get('encoder_params', None), dict):
                params_dict = dict[ImageFormat, typing.Any]()
                for key, params in dict(raw_dict['encoder_params']).items():
                    if isinstance(params, str):
                        params = _parse_encoder_params(params)

                    if not isinstance(params, dict):
                        raise ValueError(f"Encoder params for '{key}' must be a dict or a query string")
                    params_dict[_parse_format_key(str(key))] = params

                raw_dict['encoder_params'] = params_dict
            result = raw_dict

        return result

    @classmethod
    def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,
            file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, JsonConfigSettingsSource(
            settings_cls), dotenv_settings, file_secret_settings


_app_settings: AppSettings | None = None


def get_app_settings() -> AppSettings:
    global _app_settings
    if not _app_settings:
        _app_settings = AppSettings()
    return _app_settings
