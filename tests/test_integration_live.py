"""
Live browser integration tests for reflens.

Run with:
    pytest tests/test_integration_live.py -m integration -v -s

These are excluded from the default `pytest tests/` run because they require
a Playwright-controlled Chromium browser (CDP is Chromium-only). Pages are
served with ``page.set_content`` so no network access is needed.
"""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from playwright.async_api import Browser, BrowserContext, Page, async_playwright

from reflens import (
    PlaywrightDriver,
    RefLens,
    RefNotFound,
    ScopeNotFound,
    SemanticDescriptor,
    StructuralDescriptor,
)

pytestmark = pytest.mark.integration


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def browser() -> AsyncGenerator[Browser, None]:
    async with async_playwright() as pw:
        b = await pw.chromium.launch(
            headless=True,
            args=["--no-sandbox", "--disable-dev-shm-usage"],
        )
        yield b
        await b.close()


@pytest_asyncio.fixture
async def page(browser: Browser) -> AsyncGenerator[Page, None]:
    """Fresh browser context for every test."""
    ctx: BrowserContext = await browser.new_context(viewport={"width": 1280, "height": 800})
    pg = await ctx.new_page()
    yield pg
    await ctx.close()


_LANDING = """
<html><head><title>Landing</title></head><body>
  <h1>Welcome</h1>
  <button onclick="document.title='clicked'">Submit</button>
  <a href="#docs">Docs</a>
</body></html>
"""

_SAVES = """
<html><body>
  <button onclick="window.clicked='a'">Save</button>
  <button onclick="window.clicked='b'">Save</button>
  <button onclick="window.clicked='c'">Save</button>
</body></html>
"""

_CARD = """
<html><body>
  <div id="card" onclick="window.clicked='card'" style="cursor:pointer;width:200px;height:40px">Open card</div>
  <button>Real</button>
</body></html>
"""

_SCOPED = """
<html><body>
  <nav id="nav"><a href="#a">Home</a><a href="#b">About</a></nav>
  <main><a href="#c">Home</a></main>
</body></html>
"""


# ─────────────────────────────────────────────────────────────────────────────
# Tests
# ─────────────────────────────────────────────────────────────────────────────


async def test_interactive_snapshot_and_click(page: Page):
    await page.set_content(_LANDING)
    lens = RefLens(PlaywrightDriver(page))

    full = await lens.snapshot()
    print(f"\n[landing] full tree:\n{full.tree}")
    assert 'heading "Welcome"' in full.tree
    assert full.title == "Landing"

    result = await lens.snapshot(interactive=True)
    assert result.version == 2
    assert list(result.refs.values()) == [
        SemanticDescriptor(role="button", name="Submit"),
        SemanticDescriptor(role="link", name="Docs"),
    ]

    button = await lens.resolve("@e1")
    await button.click()
    assert await page.title() == "clicked"


async def test_duplicate_buttons_resolve_in_dom_order(page: Page):
    await page.set_content(_SAVES)
    lens = RefLens(PlaywrightDriver(page))
    result = await lens.snapshot(interactive=True)
    assert [d.nth for d in result.refs.values()] == [0, 1, 2]

    for ref, expected in zip(result.refs, ["a", "b", "c"]):
        await (await lens.resolve(ref)).click()
        assert await page.evaluate("window.clicked") == expected


async def test_cursor_interactive_div(page: Page):
    await page.set_content(_CARD)
    lens = RefLens(PlaywrightDriver(page))

    plain = await lens.snapshot(interactive=True)
    assert [d.role for d in plain.refs.values()] == ["button"]

    result = await lens.snapshot(cursor=True)
    structural = [d for d in result.refs.values() if isinstance(d, StructuralDescriptor)]
    print(f"\n[cursor] tree:\n{result.tree}")
    assert len(structural) == 1
    assert structural[0].role == "clickable"
    assert structural[0].selector == "#card"

    ref = next(r for r, d in result.refs.items() if d is structural[0])
    await (await lens.resolve(ref)).click()
    assert await page.evaluate("window.clicked") == "card"


async def test_scoped_snapshot(page: Page):
    await page.set_content(_SCOPED)
    lens = RefLens(PlaywrightDriver(page))

    result = await lens.snapshot(selector="#nav", interactive=True)
    names = [d.name for d in result.refs.values()]
    assert names == ["Home", "About"]
    assert all(d.scope == "#nav" for d in result.refs.values())

    link = await lens.resolve("e1")
    assert await link.get_attribute("href") == "#a"


async def test_missing_scope_keeps_previous_refs(page: Page):
    await page.set_content(_SCOPED)
    lens = RefLens(PlaywrightDriver(page))
    await lens.snapshot(interactive=True)
    before = lens.available_refs()

    with pytest.raises(ScopeNotFound):
        await lens.snapshot(selector="#does-not-exist")
    assert lens.available_refs() == before


async def test_navigation_invalidates_refs(page: Page):
    await page.set_content(_LANDING)
    lens = RefLens(PlaywrightDriver(page))
    await lens.snapshot(interactive=True)

    await page.goto("about:blank")
    with pytest.raises(RefNotFound):
        await lens.resolve("e1")
    assert lens.version == 0


async def test_fragment_change_keeps_refs(page: Page):
    await page.set_content(_LANDING)
    lens = RefLens(PlaywrightDriver(page))
    await lens.snapshot(interactive=True)

    await page.click("a[href='#docs']")
    await page.wait_for_timeout(100)
    assert lens.version == 1
    assert (await lens.resolve("e1")) is not None
