"""Bundled zscripts scripts (list, gen, example); each module is one script."""
