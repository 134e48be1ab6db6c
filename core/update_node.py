"""Rewrite version declarations inside package.json text."""

import re


def update_package_data(
    content: str, old_dependencies: dict[str, str], new_dependencies: dict[str, str]
) -> str:
    """Upgrade the dependency declarations in package.json text.

    Only the ``"name": "declaration"`` pairs are touched, so the rest of the
    file keeps its formatting. Declarations that do not appear verbatim are
    left as they are.

    Args:
        content: The package.json content
        old_dependencies: Package name -> current declaration
        new_dependencies: Package name -> upgraded declaration

    Returns:
        The updated package.json content
    """
    for name, new_declaration in new_dependencies.items():
        old_declaration = old_dependencies.get(name)
        if old_declaration is None:
            continue

        pattern = re.compile(
            '"' + re.escape(name) + r'"\s*:\s*"' + re.escape(old_declaration) + '"'
        )
        replacement = f'"{name}": "{new_declaration}"'
        content = pattern.sub(lambda _match: replacement, content)

    return content
