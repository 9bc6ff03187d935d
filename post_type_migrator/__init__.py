"""
Top-level package for the post type migration utility.

The package migrates posts of one post type to another inside a
WordPress-shaped content store, optionally assigning a taxonomy term to
every migrated post.  Modules are split into subpackages:

* :mod:`post_type_migrator.models`: run configuration, records and reports
* :mod:`post_type_migrator.stores`: content store interface and adapters
* :mod:`post_type_migrator.migrators`: per-record migration and term assignment
* :mod:`post_type_migrator.extractors`: WordPress export readers for seeding
* :mod:`post_type_migrator.utils`: errors, reporters and term helpers

Orchestration is handled in :mod:`post_type_migrator.migration_tool`;
the command line lives in :mod:`post_type_migrator.cli`.
"""

__version__ = "0.1.0"
