from importlib import metadata

try:
    __version__ = metadata.version("drivewise")
except metadata.PackageNotFoundError:  # pragma: no cover - during local dev
    from drivewise import __version__
