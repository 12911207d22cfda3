"""prerender configuration.

Run ``prerender generate`` to build the app and render every route below.
"""


async def blog_routes():
    # Fetch from your API, read files, etc.
    slugs = ["hello-world", "second-post"]
    return [f"/blog/{slug}" for slug in slugs]


async def before_render(route):
    print(f"Rendering {route}...")


async def after_render(route, html):
    return html  # Modify HTML if needed


config = {
    # Input/Output
    "input_dir": "dist",
    "output_dir": "static",
    "public_dir": "public",

    # Routes to render
    "routes": ["/"],

    # Dynamic routes from an API or files
    "dynamic_routes": [
        {"pattern": "/blog/*", "generator": blog_routes},
    ],

    # Browser configuration
    "browser": {
        "headless": True,
        "timeout": 30000,
        "viewport": {"width": 1280, "height": 720},
    },

    # Wait conditions
    "wait_for": {
        "network_idle": True,
        "selector": "#app",  # Wait for a specific element
        "timeout": 5000,
    },

    # Output naming: "nested" | "flat" | "custom" (with "custom_naming")
    "file_naming": "nested",

    # Performance
    "parallel": 4,
    "retries": 2,

    # Build integration
    "build_command": "npm run build",
    "skip_build": False,

    # SEO
    # "sitemap": {"hostname": "https://example.com", "exclude": ["/admin/*"]},
    # "robots": {"policy": [{"user_agent": "*", "allow": "/"}]},

    # Hooks
    "before_render": before_render,
    "after_render": after_render,
}
