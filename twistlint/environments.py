# twistlint/environments.py
"""
Predefined global names.

``BUILTIN`` is always active.  The other tables are enabled with the
``env`` configuration key or an ``/* eslint-env */`` comment.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable

from twistlint.errors import ConfigError


def _names(text: str) -> FrozenSet[str]:
    return frozenset(text.split())


BUILTIN = _names("""
    Array ArrayBuffer Atomics BigInt BigInt64Array BigUint64Array Boolean
    DataView Date Error EvalError Float32Array Float64Array Function
    Infinity Int16Array Int32Array Int8Array Intl JSON Map Math NaN Number
    Object Promise Proxy RangeError ReferenceError Reflect RegExp Set
    SharedArrayBuffer String Symbol SyntaxError TypeError URIError
    Uint16Array Uint32Array Uint8Array Uint8ClampedArray WeakMap WeakSet
    decodeURI decodeURIComponent encodeURI encodeURIComponent escape eval
    globalThis isFinite isNaN parseFloat parseInt undefined unescape
    constructor hasOwnProperty isPrototypeOf propertyIsEnumerable
    toLocaleString toString valueOf
""")

BROWSER = _names("""
    AbortController AbortSignal Audio Blob BroadcastChannel CSS Credential
    CredentialsContainer CustomEvent DOMException DOMParser Document
    DocumentFragment Element Event EventSource EventTarget File FileList
    FileReader FormData HTMLElement Headers History IntersectionObserver
    Image KeyboardEvent Location MediaQueryList MessageChannel MessageEvent
    MouseEvent MutationObserver Navigator Node NodeList Notification
    PerformanceObserver PromiseRejectionEvent Request ResizeObserver
    Response ShadowRoot Storage Text TextDecoder TextEncoder URL
    URLSearchParams WebSocket Window Worker XMLHttpRequest XMLSerializer
    addEventListener alert atob blur btoa cancelAnimationFrame
    cancelIdleCallback clearInterval clearTimeout close confirm console
    crypto customElements devicePixelRatio dispatchEvent document fetch
    focus getComputedStyle history indexedDB innerHeight innerWidth
    localStorage location matchMedia name navigator open opener parent
    performance postMessage print prompt queueMicrotask
    removeEventListener requestAnimationFrame requestIdleCallback screen
    scroll scrollBy scrollTo scrollX scrollY self sessionStorage
    setInterval setTimeout top window
""")

NODE = _names("""
    Buffer TextDecoder TextEncoder URL URLSearchParams __dirname __filename
    clearImmediate clearInterval clearTimeout console exports global module
    process queueMicrotask require setImmediate setInterval setTimeout
""")

ENVIRONMENTS: Dict[str, FrozenSet[str]] = {
    "builtin": BUILTIN,
    "browser": BROWSER,
    "node": NODE,
    "es6": frozenset(),
    "es2017": frozenset(),
}


def globals_for(envs: Iterable[str]) -> Dict[str, bool]:
    """Name → writable mapping for the builtin table plus *envs*."""
    result = {name: False for name in BUILTIN}
    for env in envs:
        try:
            names = ENVIRONMENTS[env]
        except KeyError:
            raise ConfigError(f"unknown environment {env!r}") from None
        for name in names:
            result.setdefault(name, True)
    return result


__all__ = ["BUILTIN", "BROWSER", "NODE", "ENVIRONMENTS", "globals_for"]
