"""Template scanning, resolution, materialization and reconstruction."""
