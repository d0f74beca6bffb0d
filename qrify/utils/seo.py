import datetime
from xml.sax.saxutils import escape

PUBLIC_PATHS = ["/", "/create", "/pricing", "/login", "/signup", "/embed/", "/api/qr/embed/", "/api/qr/redirect/"]
PRIVATE_PATHS = [
    "/dashboard/", "/admin/", "/api/auth/", "/api/admin/", "/api/user/",
    "/api/qr/generate", "/api/qr/delete/", "/api/qr/update-link/", "/api/qr/settings/",
    "/api/qr/stats/", "/api/qr/preview", "/api/qr/upload-logo", "/api/qrs",
    "/api/dashboard/", "/api/payments/", "/settings/", "/qrs/",
]
GOOGLEBOT_PUBLIC = ["/", "/create", "/pricing", "/embed/", "/api/qr/embed/", "/api/qr/redirect/"]
GOOGLEBOT_PRIVATE = ["/dashboard/", "/admin/", "/api/"]

# (path, change frequency, priority)
SITEMAP_ROUTES = [
    ("", "daily", 1.0),
    ("/create", "weekly", 0.9),
    ("/pricing", "weekly", 0.8),
    ("/login", "monthly", 0.7),
    ("/signup", "monthly", 0.7),
]


def build_robots_txt(base_url: str) -> str:
    lines = ["User-agent: *"]
    lines += [f"Allow: {p}" for p in PUBLIC_PATHS]
    lines += [f"Disallow: {p}" for p in PRIVATE_PATHS]
    lines += ["", "User-agent: Googlebot"]
    lines += [f"Allow: {p}" for p in GOOGLEBOT_PUBLIC]
    lines += [f"Disallow: {p}" for p in GOOGLEBOT_PRIVATE]
    lines += ["", f"Sitemap: {base_url.rstrip('/')}/sitemap.xml", ""]
    return "\n".join(lines)


def build_sitemap_xml(base_url: str, now=None) -> str:
    base_url = base_url.rstrip("/")
    lastmod = (now or datetime.datetime.utcnow()).strftime("%Y-%m-%d")
    entries = []
    for path, freq, priority in SITEMAP_ROUTES:
        entries.append(
            "  <url>\n"
            f"    <loc>{escape(base_url + path)}</loc>\n"
            f"    <lastmod>{lastmod}</lastmod>\n"
            f"    <changefreq>{freq}</changefreq>\n"
            f"    <priority>{priority:.1f}</priority>\n"
            "  </url>"
        )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        + "\n".join(entries)
        + "\n</urlset>\n"
    )
