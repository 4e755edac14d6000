"""Domain layer: interfaces the persistence backends implement."""
