"""Export layer — everything written to the output tree besides pages.

Copies build assets and the public directory, and derives sitemap.xml and
robots.txt from the render results.
"""

from prerender.export.assets import clean_output, copy_assets, copy_public_dir
from prerender.export.robots import generate_robots, write_robots
from prerender.export.sitemap import generate_sitemap, write_sitemap

__all__ = [
    "clean_output",
    "copy_assets",
    "copy_public_dir",
    "generate_robots",
    "generate_sitemap",
    "write_robots",
    "write_sitemap",
]
