"""Modules that bundles reference but never embed."""
from __future__ import annotations

from typing import Iterable, Sequence, Tuple

from .manifest import Manifest

# ``require("module").builtinModules`` as reported by Node.js 20.
NODE_BUILTIN_MODULES: Tuple[str, ...] = (
    "_http_agent",
    "_http_client",
    "_http_common",
    "_http_incoming",
    "_http_outgoing",
    "_http_server",
    "_stream_duplex",
    "_stream_passthrough",
    "_stream_readable",
    "_stream_transform",
    "_stream_wrap",
    "_stream_writable",
    "_tls_common",
    "_tls_wrap",
    "assert",
    "assert/strict",
    "async_hooks",
    "buffer",
    "child_process",
    "cluster",
    "console",
    "constants",
    "crypto",
    "dgram",
    "diagnostics_channel",
    "dns",
    "dns/promises",
    "domain",
    "events",
    "fs",
    "fs/promises",
    "http",
    "http2",
    "https",
    "inspector",
    "inspector/promises",
    "module",
    "net",
    "os",
    "path",
    "path/posix",
    "path/win32",
    "perf_hooks",
    "process",
    "punycode",
    "querystring",
    "readline",
    "readline/promises",
    "repl",
    "stream",
    "stream/consumers",
    "stream/promises",
    "stream/web",
    "string_decoder",
    "sys",
    "timers",
    "timers/promises",
    "tls",
    "trace_events",
    "tty",
    "url",
    "util",
    "util/types",
    "v8",
    "vm",
    "wasi",
    "worker_threads",
    "zlib",
)


def _strip_types_prefix(name: str) -> str:
    return name.replace("@types/", "", 1)


def external_modules(manifest: Manifest, builtins: Sequence[str] = NODE_BUILTIN_MODULES) -> Tuple[str, ...]:
    """Peer and optional dependencies plus host built-ins, in that order.

    The consuming application supplies all of these, so none of them are
    bundled.
    """

    names: Iterable[str] = (
        *manifest.peer_dependencies,
        *manifest.optional_dependencies,
        *builtins,
    )
    return tuple(dict.fromkeys(_strip_types_prefix(name) for name in names))


def relevant_externals(externals: Sequence[str], builtins: Sequence[str] = NODE_BUILTIN_MODULES) -> list[str]:
    builtin_set = set(builtins)
    return [name for name in externals if name not in builtin_set]
