"""
channel_catalog/validators/link_audit.py
Async reachability audit of channel URLs (`url`, `submitUrl`).

- HEAD first, GET fallback when HEAD is refused or errors
- soft-404 detection on the page title and visible text (BeautifulSoup)
- bounded concurrency with a semaphore
Results are written to <root>/reports/link_audit_<kind>.csv.
"""

import os
import re
import asyncio
from warnings import filterwarnings

import aiohttp
import pandas as pd
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning

from channel_catalog.constants.catalogs import reports_dir
from channel_catalog.logger import get_logger, phase
from channel_catalog.sources.reader import scan_details
from channel_catalog.utils.dedup import normalize_url

filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

logger = get_logger("catalog.link_audit")

# ------------------ CONSTANTS ------------------
URL_FIELDS = ("url", "submitUrl")
MAX_CONCURRENT_LINKS = int(os.getenv("LINK_AUDIT_CONCURRENCY", "20"))
REQUEST_TIMEOUT = int(os.getenv("LINK_AUDIT_TIMEOUT", "15"))
USER_AGENT = os.getenv(
    "USER_AGENT",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36",
)

ERROR_PATTERNS = [
    r"page not found", r"\b404\b", r"not found", r"页面不存在", r"找不到",
    r"something went wrong", r"domain is for sale",
]


# ------------------ HELPERS ------------------
def _headers():
    return {
        "User-Agent": USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "zh-CN,zh;q=0.9,en;q=0.8",
    }


def looks_like_error_page(html):
    """True when the title or the start of the visible text reads like an error page."""
    if not html:
        return False
    soup = BeautifulSoup(html, "html.parser")
    title = (soup.title.string if soup.title and soup.title.string else "") or ""
    visible = " ".join(soup.stripped_strings)[:2000]
    text = f"{title} {visible}".lower()
    return any(re.search(p, text) for p in ERROR_PATTERNS)


def collect_channel_urls(root, kind, locales):
    """[(slug, field, url)] from every detail record, de-duplicated by URL."""
    rows = []
    for locale in locales:
        records, _ = scan_details(root, kind, locale)
        for slug, record in records.items():
            for field in URL_FIELDS:
                value = record["fields"].get(field)
                if isinstance(value, str) and value.startswith(("http://", "https://")):
                    rows.append((slug, field, value))

    out, seen = [], set()
    for slug, field, url in rows:
        key = normalize_url(url)
        if key not in seen:
            seen.add(key)
            out.append((slug, field, url.strip()))
    return out


# ------------------ MAIN CHECK ------------------
async def check_url(url, session, timeout=REQUEST_TIMEOUT):
    result = {"url": url, "final_url": url, "status": "UNKNOWN", "status_code": None, "reason": ""}
    client_timeout = aiohttp.ClientTimeout(total=timeout)

    try:
        async with session.head(url, headers=_headers(), allow_redirects=True, timeout=client_timeout) as r:
            result.update({"status_code": r.status, "final_url": str(r.url)})
            if r.status < 400:
                result.update({"status": "OK", "reason": f"HTTP {r.status}"})
                return result
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.debug("HEAD failed for %s: %s", url, e)

    try:
        async with session.get(url, headers=_headers(), allow_redirects=True, timeout=client_timeout) as r:
            html = await r.text(errors="ignore")
            result.update({"status_code": r.status, "final_url": str(r.url)})
            if r.status in (404, 410) or r.status >= 500:
                result.update({"status": "BROKEN", "reason": f"HTTP {r.status}"})
            elif r.status == 403:
                result.update({"status": "IGNORED_403", "reason": "403 - likely bot protection"})
            elif looks_like_error_page(html):
                result.update({"status": "SOFT_404", "reason": "error page content"})
            else:
                result.update({"status": "OK", "reason": f"HTTP {r.status}"})
    except asyncio.TimeoutError:
        result.update({"status": "TIMEOUT", "reason": "timeout"})
    except aiohttp.ClientError as e:
        result.update({"status": "BROKEN", "reason": str(e)})
    return result


async def run_batch_check(urls, concurrency=MAX_CONCURRENT_LINKS, checker=check_url):
    """Checks URLs concurrently; result order follows input order."""
    sem = asyncio.Semaphore(concurrency)

    async def bounded(u, session):
        async with sem:
            return await checker(u, session)

    async with aiohttp.ClientSession() as session:
        return await asyncio.gather(*(bounded(u, session) for u in urls))


def audit_catalog_links(root, kind, locales, concurrency=MAX_CONCURRENT_LINKS, checker=check_url):
    """
    Runs the audit and writes the CSV report.
    Returns (report_path, results) where each result carries slug and field.
    """
    phase(logger, f"link audit {kind}")
    targets = collect_channel_urls(root, kind, locales)
    logger.info("Checking %d unique URLs", len(targets))

    checked = asyncio.run(run_batch_check([u for _, _, u in targets], concurrency, checker))
    results = [
        {"slug": slug, "field": field, **res}
        for (slug, field, _), res in zip(targets, checked)
    ]

    out_dir = reports_dir(root)
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, f"link_audit_{kind}.csv")
    columns = ["slug", "field", "url", "final_url", "status", "status_code", "reason"]
    pd.DataFrame(results, columns=columns).to_csv(path, index=False)

    broken = [r for r in results if r["status"] in ("BROKEN", "SOFT_404", "TIMEOUT")]
    for r in broken:
        logger.warning("⚠️  %s %s -> %s (%s)", r["slug"], r["field"], r["status"], r["reason"])
    logger.info("Link audit written -> %s (%d problems)", path, len(broken))
    return path, results
