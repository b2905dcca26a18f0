"""Base class for configs that load from and save to a JSON file."""

import contextlib
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Callable, ClassVar, Iterable, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, PrivateAttr

from jsonconfig.events import ConfigEvents
from jsonconfig.exceptions import ConfigNotBoundError
from jsonconfig.options import PLAIN_DIALECT, JsonConfigOptions, get_global_options
from jsonconfig.outcome import Outcome, attempt
from jsonconfig.serializer import deserialize, serialize

logger = logging.getLogger(__name__)

ConfigT = TypeVar("ConfigT", bound="JsonConfig")
PathLike = Union[str, "os.PathLike[str]"]
Listeners = Mapping[str, Union[Callable[["JsonConfig"], None], Iterable[Callable[["JsonConfig"], None]]]]


class JsonConfig(BaseModel):
    """A pydantic model that is loaded from and saved to a JSON file.

    Subclasses declare their payload as ordinary fields, all of which need a
    default so a fresh config can be created when the file is missing::

        class Settings(JsonConfig):
            default_path = "settings.json"

            text: Optional[str] = None

        settings = Settings.load()
        settings.text = "Hello!"
        settings.save()

    The file path and options a config was read or created with are kept
    outside the payload and reused by ``save``.
    """

    model_config = ConfigDict(extra="ignore")

    # Per-type defaults; None means "<ClassName>.json" and the global options
    default_path: ClassVar[Optional[str]] = None
    default_options: ClassVar[Optional[JsonConfigOptions]] = None

    _path: Optional[str] = PrivateAttr(default=None)
    _options: Optional[JsonConfigOptions] = PrivateAttr(default=None)
    _events: ConfigEvents = PrivateAttr(default_factory=ConfigEvents)

    @property
    def path(self) -> Optional[str]:
        """The file this config was read from or created for."""
        return self._path

    @path.setter
    def path(self, value: Optional[PathLike]) -> None:
        self._path = os.fspath(value) if value is not None else None

    @property
    def options(self) -> Optional[JsonConfigOptions]:
        """The options this config was read or created with."""
        return self._options

    @options.setter
    def options(self, value: Optional[JsonConfigOptions]) -> None:
        self._options = value

    @property
    def is_bound(self) -> bool:
        return self._path is not None and self._options is not None

    @property
    def events(self) -> ConfigEvents:
        """Lifecycle hooks of this instance."""
        return self._events

    @property
    def json(self) -> str:
        """The payload as compact, strict JSON, independent of the bound options."""
        return serialize(self, PLAIN_DIALECT)

    def __str__(self) -> str:
        return self.json

    def __eq__(self, other: object) -> bool:
        # Payload equality; path, options and listeners are not compared
        if not isinstance(other, JsonConfig):
            return NotImplemented
        return type(self) is type(other) and self.__dict__ == other.__dict__

    # Lifecycle hooks, overridable by subclasses

    def on_reading(self) -> None:
        self._events.reading.fire(self)

    def on_creating(self) -> None:
        self._events.creating.fire(self)

    def on_loaded(self) -> None:
        self._events.loaded.fire(self)

    def on_before_save(self) -> None:
        self._events.before_save.fire(self)

    def on_after_save(self) -> None:
        self._events.after_save.fire(self)

    # Defaults

    @classmethod
    def get_default_path(cls) -> str:
        return cls.default_path if cls.default_path is not None else f"{cls.__name__}.json"

    @classmethod
    def get_default_options(cls) -> JsonConfigOptions:
        """Return the type's declared options, else the global options at call time."""
        if cls.default_options is not None:
            return cls.default_options
        return get_global_options()

    @classmethod
    def _resolve(cls, path: Optional[PathLike], options: Optional[JsonConfigOptions]):
        resolved_path = os.fspath(path) if path is not None else cls.get_default_path()
        resolved_options = options if options is not None else cls.get_default_options()
        return resolved_path, resolved_options

    def _bind(self, path: str, options: JsonConfigOptions) -> None:
        self._path = path
        self._options = options

    def _attach(self, listeners: Optional[Listeners]) -> None:
        if not listeners:
            return
        for name, handlers in listeners.items():
            hook = self._events.get(name)
            if callable(handlers):
                handlers = [handlers]
            for handler in handlers:
                hook.subscribe(handler)

    # Operations

    @classmethod
    def load(
        cls: Type[ConfigT],
        path: Optional[PathLike] = None,
        options: Optional[JsonConfigOptions] = None,
        listeners: Optional[Listeners] = None,
    ) -> Optional[ConfigT]:
        """Read the config file, or create a new config if it does not exist.

        Args:
            path: File to load, defaults to ``get_default_path()``
            options: Options to use, defaults to ``get_default_options()``
            listeners: Event name to handler(s), subscribed on the new instance
                before any event fires

        Returns:
            The loaded config. None if the file does not exist and
            ``create_if_missing`` is off, or if the file contains ``null``.
        """
        path, options = cls._resolve(path, options)
        if Path(path).is_file():
            logger.debug(f"Loading {cls.__name__} from {path}")
            config = cls.read(path, options, listeners)
        elif options.create_if_missing:
            logger.debug(f"{path} not found, creating a new {cls.__name__}")
            config = cls.create(path, options, listeners)
        else:
            logger.debug(f"{path} not found and creation is disabled")
            config = None

        if config is not None:
            config.on_loaded()
        return config

    @classmethod
    def read(
        cls: Type[ConfigT],
        path: Optional[PathLike] = None,
        options: Optional[JsonConfigOptions] = None,
        listeners: Optional[Listeners] = None,
    ) -> Optional[ConfigT]:
        """Load the config only by reading the config file.

        Returns:
            The config, or None if the file contains JSON ``null``.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file is not valid JSON for the dialect.
            pydantic.ValidationError: If the JSON does not fit the fields.
        """
        path, options = cls._resolve(path, options)
        text = Path(path).read_text(encoding="utf-8-sig")
        config = deserialize(text, cls, options.serializer_options)
        if config is None:
            logger.debug(f"{path} contains null, no {cls.__name__} produced")
            return None

        config._attach(listeners)
        config._bind(path, options)
        config.on_reading()
        return config

    @classmethod
    def create(
        cls: Type[ConfigT],
        path: Optional[PathLike] = None,
        options: Optional[JsonConfigOptions] = None,
        listeners: Optional[Listeners] = None,
    ) -> ConfigT:
        """Load the config only by creating a new one with default values.

        The new config is saved immediately when ``save_on_create`` is set.
        """
        path, options = cls._resolve(path, options)
        config = cls()
        config._attach(listeners)
        config._bind(path, options)
        config.on_creating()
        if options.save_on_create:
            config.save()
        return config

    def save(self, path: Optional[PathLike] = None, options: Optional[JsonConfigOptions] = None) -> None:
        """Save the config to a file, replacing its content.

        Args:
            path: Target file, defaults to the bound path
            options: Options to use, defaults to the bound options

        Raises:
            ConfigNotBoundError: If no path or options are given or bound.
            OSError: If the file cannot be written.
        """
        path = os.fspath(path) if path is not None else self._path
        options = options if options is not None else self._options
        if path is None or options is None:
            raise ConfigNotBoundError(
                f"{type(self).__name__} has no path or options bound; load, read or create it first"
            )

        self.on_before_save()
        text = serialize(self, options.serializer_options)
        _write_text(Path(path), text, atomic=options.atomic_write)
        logger.debug(f"Saved {type(self).__name__} to {path}")
        self.on_after_save()

    @classmethod
    def try_load(
        cls: Type[ConfigT],
        path: Optional[PathLike] = None,
        options: Optional[JsonConfigOptions] = None,
        listeners: Optional[Listeners] = None,
    ) -> Outcome:
        """Like ``load``, but report errors in the returned ``Outcome``."""
        return attempt(cls.load, path, options, listeners, reraise=(ConfigNotBoundError,))

    def try_save(self, path: Optional[PathLike] = None, options: Optional[JsonConfigOptions] = None) -> Outcome:
        """Like ``save``, but report errors in the returned ``Outcome``.

        Saving an unbound config is a programming error and still raises
        ``ConfigNotBoundError``.
        """
        return attempt(self.save, path, options, reraise=(ConfigNotBoundError,))


def _file_mode(path: Path) -> int:
    """Mode for a rewritten file: the existing file's, else what ``open`` would create."""
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _write_text(path: Path, text: str, atomic: bool = False) -> None:
    if not atomic:
        path.write_text(text, encoding="utf-8")
        return

    # mkstemp creates 0600 files; keep the mode a plain write would leave
    mode = _file_mode(path)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise
