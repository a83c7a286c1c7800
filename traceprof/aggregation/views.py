"""
View Registry

Loads aggregate view definitions from views.yaml.
"""

from pathlib import Path
from typing import Optional, Union

import yaml


class ViewDefinition:
    """Represents an aggregate view definition."""

    def __init__(self, config: dict):
        self.id = config['id']
        self.name = config['name']
        self.description = config.get('description', '')
        self.runner = config['runner']
        self.requires_location = bool(config.get('requires_location', False))

    def __repr__(self):
        return f"ViewDefinition(id={self.id!r}, name={self.name!r})"


class ViewRegistry:
    """View definitions loaded from YAML config, in file order."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Args:
            config_path: Path to views.yaml. If None, uses the packaged file.
        """
        if config_path is None:
            config_path = Path(__file__).parent / 'views.yaml'

        with open(config_path) as f:
            config = yaml.safe_load(f)

        self.definitions = [ViewDefinition(d) for d in config['views']]

    def get(self, view_id: str) -> ViewDefinition:
        """
        Raises:
            ValueError: If no view has this id
        """
        for defn in self.definitions:
            if defn.id == view_id:
                return defn
        known = ', '.join(d.id for d in self.definitions)
        raise ValueError(f"Unknown view: {view_id!r} (known: {known})")

    def list_views(self) -> list[dict]:
        return [
            {
                'id': d.id,
                'name': d.name,
                'description': d.description,
                'runner': d.runner,
            }
            for d in self.definitions
        ]


def get_registry() -> ViewRegistry:
    """Get a fresh ViewRegistry (reloads YAML each time)."""
    return ViewRegistry()
