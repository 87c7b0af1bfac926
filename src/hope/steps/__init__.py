"""Pipeline steps. Each subpackage exposes a ``step.py`` with one ``*Step`` class."""
