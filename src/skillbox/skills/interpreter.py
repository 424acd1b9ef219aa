"""Map script file extensions to the interpreter that runs them."""

EXTENSION_INTERPRETERS: dict[str, str] = {
    ".py": "python3",
    ".sh": "bash",
    ".bash": "bash",
    ".js": "node",
    ".mjs": "node",
    ".cjs": "node",
    ".ts": "tsx",
    ".rb": "ruby",
    ".pl": "perl",
}


def resolve_interpreter(extension: str) -> str | None:
    """
    Return the interpreter command for a file extension.

    Args:
        extension: Extension with or without the leading dot (".py", "SH")

    Returns:
        Interpreter name, or None if the extension is not supported
    """
    ext = extension.lower()
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    return EXTENSION_INTERPRETERS.get(ext)


def supported_extensions() -> list[str]:
    """List every extension that resolves to an interpreter."""
    return sorted(EXTENSION_INTERPRETERS)
