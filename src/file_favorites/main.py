"""Console entry point for the File Favorites application."""

import sys
from typing import List, Optional

from .models.bookmarkable import ActivationResult, Bookmarkable, Group
from .services.document_storage import FavoritesError
from .services.favorite_store import FavoriteStore
from .utils.file_matching import open_with_system
from .utils.logging_setup import setup_logging


def truncate_string(s: str, max_len: int) -> str:
    """Truncate a string to max length, adding ... if needed."""
    if not s:
        return ""
    if len(s) <= max_len:
        return s
    return s[: max_len - 3] + "..."


def print_tree(store: FavoriteStore, group: Optional[Group] = None, depth: int = 0):
    """Print the favorites below ``group`` as an indented tree."""
    for entity in store.children(group):
        item = entity.to_display_item(store.tree)
        marker = "+" if entity.is_group else "-"
        line = f"{'  ' * depth}{marker} {item.label}"
        if item.description:
            line += f" {item.description}"
        print(line)
        if isinstance(entity, Group):
            print_tree(store, entity, depth + 1)


def print_result(result: ActivationResult):
    for path in result.opened:
        print(f"  Opened: {path}")
    if result.errors:
        print(f"  Errors: {len(result.errors)}")
        for error in result.errors:
            print(f"    - {error}")


def choose(choices: List[Bookmarkable], prompt: str) -> Optional[Bookmarkable]:
    """Ask the user to pick one entry by number.

    Returns:
        The chosen entry, or None if the user entered nothing
    """
    while True:
        response = input(prompt).strip()
        if not response:
            return None
        if response.isdigit() and 1 <= int(response) <= len(choices):
            return choices[int(response) - 1]
        print(f"Please enter a number between 1 and {len(choices)}.")


def main():
    """Show the favorites and open the ones the user picks."""
    setup_logging()

    print("=" * 60)
    print("File Favorites")
    print("=" * 60)

    store = FavoriteStore.from_data_dir()
    print(f"\nFavorites file: {store.storage_path}")

    try:
        repairs = store.load()
    except FavoritesError as e:
        print(f"\nCould not load favorites: {e}")
        sys.exit(1)

    if repairs:
        print(f"\nThe favorites file was repaired ({len(repairs)} fixes, a backup was kept):")
        for repair in repairs:
            print(f"  - {repair}")

    if not len(store.tree):
        print("\nNo favorites yet. Add some with the file-favorites-gui application.")
        return

    print("\n--- Favorites ---")
    print_tree(store)

    favorites = store.favorites() + store.groups()
    print("\n--- Open ---")
    for number, favorite in enumerate(favorites, start=1):
        kind = "group" if favorite.is_group else "favorite"
        where = f" ({favorite.description})" if favorite.description else ""
        detail = truncate_string(favorite.detail or "", 40)
        print(f"{number:>3}. [{kind}] {favorite.label}{where}  {detail}".rstrip())

    print("\n" + "-" * 60)
    while True:
        favorite = choose(favorites, "Number to open (empty to quit): ")
        if favorite is None:
            break
        print(f"\nOpening {favorite.label}...")
        print_result(favorite.activate(open_with_system, store.tree))

    print("\n" + "=" * 60)
    print("Done!")
    print("=" * 60)


if __name__ == "__main__":
    main()
