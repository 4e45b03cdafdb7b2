"""SDK symbol index."""

from index.sdk_index import (
    SDK_SOURCE_EXTENSIONS,
    IndexBuildError,
    SdkSymbolIndex,
    build_index,
)

__all__ = ["SDK_SOURCE_EXTENSIONS", "IndexBuildError", "SdkSymbolIndex", "build_index"]
