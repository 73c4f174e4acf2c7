# src/build_assembler/constants.py
"""Central constants used across the project."""

# --- env keys ---
DEFAULT_ENV_LOG_LEVEL: str = "LOG_LEVEL"

# --- program defaults ---
DEFAULT_LOG_LEVEL: str = "info"

# --- config defaults ---
DEFAULT_MAX_WORKERS: int | None = None  # ThreadPoolExecutor picks
DEFAULT_PROGRESS_INTERVAL: int = 100  # log every N built thrift libraries
DEFAULT_FETCH_ATTEMPTS: int = 2  # first try + one retry
DEFAULT_FETCH_TIMEOUT: float = 60.0  # seconds
DEFAULT_BUILD_TOOL: str = "buck"
DEFAULT_SWIG_BUILDER_TARGET: str = "//third-party-buck/platform007/tools/swig:bin/swig"

# --- thrift command markers ---
THRIFT_PLAIN_MARKER: str = "py:"
THRIFT_TYPED_STUB_MARKER: str = "mstch_pyi:"

# --- stubs ---
PYTHON_SOURCE_SUFFIX: str = ".py"
STUB_INTERFACE_SUFFIX: str = "i"  # foo.py -> foo.pyi
PLACEHOLDER_STUB_CONTENT: str = "# pyre-placeholder-stub\n"
