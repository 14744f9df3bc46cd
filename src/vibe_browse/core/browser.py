"""Browser process supervision.

This module owns the lifecycle of the one local Chrome/Chromium process the
browser tools drive. The process is spawned with a remote debugging port and
a persistent profile directory, polled over its ``/json/version`` control
endpoint until it answers, and then attached to with Playwright over CDP.

State machine::

    UNSTARTED -> LAUNCHING -> POLLING -> READY -> CLOSED
                      \\           \\
                       +-----------+--> FAILED (terminal)

A CLOSED supervisor relaunches transparently on the next request. The
profile directory is never deleted so logins and cookies survive sessions.
"""

import asyncio
import contextlib
import os
import shutil
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable

import httpx
from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from vibe_browse.core.errors import (
    BrowserNotFoundError,
    BrowserReadinessTimeout,
    BrowserStartupError,
)
from vibe_browse.core.logging import ErrorIds, logError, logEvent, logForDebugging
from vibe_browse.core.polling import poll_until_ready

DEFAULT_CDP_PORT = 9222

# Known install locations, checked in order before falling back to PATH.
_BROWSER_CANDIDATES: dict[str, list[str]] = {
    "darwin": [
        "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
        "/Applications/Chromium.app/Contents/MacOS/Chromium",
        "/Applications/Google Chrome Canary.app/Contents/MacOS/Google Chrome Canary",
    ],
    "win32": [
        r"C:\Program Files\Google\Chrome\Application\chrome.exe",
        r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
        r"C:\Program Files\Chromium\Application\chrome.exe",
    ],
    "linux": [
        "/usr/bin/google-chrome",
        "/usr/bin/google-chrome-stable",
        "/usr/bin/chromium",
        "/usr/bin/chromium-browser",
        "/opt/google/chrome/chrome",
        "/snap/bin/chromium",
    ],
}

_PATH_NAMES = ["google-chrome", "google-chrome-stable", "chromium", "chromium-browser", "chrome"]

INSTALL_INSTRUCTIONS = (
    "Install Chrome or Chromium, or point VIBE_BROWSE_CHROME at an existing binary:\n"
    "  macOS:   brew install --cask google-chrome\n"
    "  Linux:   sudo apt install chromium   (or google-chrome-stable from https://www.google.com/chrome/)\n"
    "  Windows: winget install Google.Chrome"
)


class BrowserState(str, Enum):
    """Lifecycle states of the supervised browser."""

    UNSTARTED = "unstarted"
    LAUNCHING = "launching"
    POLLING = "polling"
    READY = "ready"
    CLOSED = "closed"
    FAILED = "failed"


@dataclass
class BrowserHandle:
    """Everything needed to drive the running browser."""

    process: asyncio.subprocess.Process
    endpoint: str
    playwright: Playwright
    browser: Browser
    context: BrowserContext
    page: Page


def _is_executable(path: str) -> bool:
    return Path(path).is_file() and os.access(path, os.X_OK)


def _platform_key() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    return sys.platform


def find_browser_executable(explicit: str | None = None) -> str:
    """Locate a Chrome/Chromium binary.

    Args:
        explicit: A user-supplied path that overrides discovery.

    Returns:
        Path (or PATH-resolved name) of the executable.

    Raises:
        BrowserNotFoundError: If nothing usable is found. The message carries
                              per-platform install instructions.
    """
    if explicit:
        if _is_executable(explicit):
            return explicit
        resolved = shutil.which(explicit)
        if resolved:
            return resolved
        raise BrowserNotFoundError(
            f"Browser executable {explicit!r} does not exist or is not executable.\n"
            f"{INSTALL_INSTRUCTIONS}"
        )

    for candidate in _BROWSER_CANDIDATES.get(_platform_key(), []):
        if _is_executable(candidate):
            return candidate

    for name in _PATH_NAMES:
        resolved = shutil.which(name)
        if resolved:
            return resolved

    raise BrowserNotFoundError(f"No Chrome or Chromium executable was found.\n{INSTALL_INSTRUCTIONS}")


class BrowserSupervisor:
    """Owns the single browser process used by the browser tools.

    ``get_browser()`` returns a ready handle, launching the browser if needed.
    Concurrent callers during startup wait on the same launch instead of
    spawning a second process. ``close()`` tears the browser down; the next
    ``get_browser()`` starts a fresh one with full readiness polling.
    """

    def __init__(
        self,
        profile_dir: Path | str,
        downloads_dir: Path | str | None = None,
        port: int = DEFAULT_CDP_PORT,
        headless: bool = False,
        executable: str | None = None,
        poll_attempts: int = 50,
        poll_interval: float = 0.2,
        playwright_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        """Initialize the supervisor. Nothing is launched until first use.

        Args:
            profile_dir: Persistent user-data directory for the browser.
            downloads_dir: Where downloads are saved (optional).
            port: Local remote-debugging port.
            headless: Launch without a visible window.
            executable: Explicit browser binary (skips discovery).
            poll_attempts: Readiness poll bound.
            poll_interval: Seconds between readiness polls.
            playwright_factory: Returns an object whose ``start()`` yields a
                                Playwright instance.
        """
        self._profile_dir = Path(profile_dir)
        self._downloads_dir = Path(downloads_dir) if downloads_dir is not None else None
        self._port = port
        self._headless = headless
        self._executable = executable
        self._poll_attempts = poll_attempts
        self._poll_interval = poll_interval
        self._playwright_factory = playwright_factory

        self._state = BrowserState.UNSTARTED
        self._handle: BrowserHandle | None = None
        self._process: asyncio.subprocess.Process | None = None
        self._failure: BrowserStartupError | None = None
        self._lock = asyncio.Lock()
        self.launch_count = 0

    @property
    def state(self) -> BrowserState:
        return self._state

    @property
    def endpoint(self) -> str:
        return f"http://127.0.0.1:{self._port}"

    def build_flags(self) -> list[str]:
        """Command-line flags for the browser process."""
        flags = [
            f"--remote-debugging-port={self._port}",
            f"--user-data-dir={self._profile_dir}",
            "--remote-allow-origins=*",
            "--no-first-run",
            "--no-default-browser-check",
        ]
        if self._headless:
            flags.append("--headless=new")
        return flags

    async def get_browser(self) -> BrowserHandle:
        """Return the ready browser, launching it first if necessary.

        Raises:
            BrowserStartupError: If the browser cannot be started. Once the
                                 supervisor is FAILED every call re-raises the
                                 original error. The failure is only logged
                                 at info level; the caller reports it.
        """
        if self._state is BrowserState.READY and self._handle is not None:
            return self._handle

        async with self._lock:
            if self._state is BrowserState.READY and self._handle is not None:
                return self._handle
            if self._state is BrowserState.FAILED and self._failure is not None:
                raise self._failure

            try:
                handle = await self._start()
            except BrowserStartupError as e:
                self._state = BrowserState.FAILED
                self._failure = e
                raise

            self._handle = handle
            self._state = BrowserState.READY
            logEvent("browser_ready", {"endpoint": handle.endpoint, "launches": self.launch_count})
            return handle

    async def get_page(self) -> Page:
        """Shortcut for the active page of the ready browser."""
        handle = await self.get_browser()
        return handle.page

    async def control_endpoint_ready(self) -> bool:
        """Check the ``/json/version`` control endpoint once."""
        try:
            async with httpx.AsyncClient(timeout=1.0) as client:
                response = await client.get(f"{self.endpoint}/json/version")
        except httpx.HTTPError:
            return False
        return response.status_code == 200

    async def _start(self) -> BrowserHandle:
        self._state = BrowserState.LAUNCHING
        try:
            executable = find_browser_executable(self._executable)
        except BrowserNotFoundError as e:
            logForDebugging(str(e).splitlines()[0], level="info", extra={"error_id": ErrorIds.BROWSER_NOT_FOUND})
            raise

        self._profile_dir.mkdir(parents=True, exist_ok=True)
        try:
            process = await asyncio.create_subprocess_exec(
                executable,
                *self.build_flags(),
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            logForDebugging(
                f"Could not launch {executable}: {e}", level="info", extra={"error_id": ErrorIds.BROWSER_LAUNCH_FAILED}
            )
            raise BrowserStartupError(f"Could not launch {executable}: {e}") from e

        self._process = process
        self.launch_count += 1
        logEvent("browser_launched", {"executable": executable, "pid": process.pid, "port": self._port})

        self._state = BrowserState.POLLING

        async def _ready() -> bool:
            if process.returncode is not None:
                logForDebugging(
                    f"{executable} exited with code {process.returncode} before it was ready",
                    level="info",
                    extra={"error_id": ErrorIds.BROWSER_LAUNCH_FAILED},
                )
                raise BrowserStartupError(
                    f"Browser process {executable} exited with code {process.returncode} before it was ready."
                )
            return await self.control_endpoint_ready()

        attempts = await poll_until_ready(_ready, self._poll_attempts, self._poll_interval)
        if not attempts:
            logForDebugging(
                f"No answer from {self.endpoint}/json/version",
                level="info",
                extra={
                    "error_id": ErrorIds.BROWSER_READINESS_TIMEOUT,
                    "attempts": self._poll_attempts,
                    "interval": self._poll_interval,
                },
            )
            await self._stop_process(process)
            raise BrowserReadinessTimeout(self.endpoint, self._poll_attempts, self._poll_interval)

        try:
            return await self._attach(process)
        except Exception as e:
            logForDebugging(
                f"Could not attach to {self.endpoint}: {e}", level="info", extra={"error_id": ErrorIds.BROWSER_LAUNCH_FAILED}
            )
            await self._stop_process(process)
            raise BrowserStartupError(f"Could not attach to browser at {self.endpoint}: {e}") from e

    async def _attach(self, process: asyncio.subprocess.Process) -> BrowserHandle:
        playwright = await self._playwright_factory().start()
        try:
            browser = await playwright.chromium.connect_over_cdp(self.endpoint)
            context = browser.contexts[0] if browser.contexts else await browser.new_context()
            page = context.pages[0] if context.pages else await context.new_page()
        except Exception:
            await playwright.stop()
            raise

        await self._route_downloads(browser)
        return BrowserHandle(
            process=process,
            endpoint=self.endpoint,
            playwright=playwright,
            browser=browser,
            context=context,
            page=page,
        )

    async def _route_downloads(self, browser: Browser) -> None:
        if self._downloads_dir is None:
            return
        try:
            session = await browser.new_browser_cdp_session()
            await session.send(
                "Browser.setDownloadBehavior",
                {"behavior": "allow", "downloadPath": str(self._downloads_dir)},
            )
        except Exception as e:
            logForDebugging(f"Could not route downloads to {self._downloads_dir}: {e}", level="warning")

    async def close(self) -> None:
        """Disconnect and kill the browser. Errors are logged, never raised.

        The profile directory is left in place.
        """
        async with self._lock:
            handle, self._handle = self._handle, None
            process, self._process = self._process, None
            if handle is None and process is None:
                if self._state is BrowserState.READY:
                    self._state = BrowserState.CLOSED
                return

            if handle is not None:
                await self._best_effort(handle.browser.close(), "disconnect browser")
                await self._best_effort(handle.playwright.stop(), "stop playwright")
            if process is not None:
                await self._stop_process(process)

            self._state = BrowserState.CLOSED
            logEvent("browser_closed", {"pid": process.pid if process else None})

    def terminate(self) -> None:
        """Kill the browser process immediately (signal path).

        Synchronous and best-effort: no Playwright teardown, no waiting.
        """
        process, self._process = self._process, None
        self._handle = None
        if process is None:
            return
        self._state = BrowserState.CLOSED
        if process.returncode is not None:
            return
        try:
            process.kill()
        except (ProcessLookupError, OSError) as e:
            logForDebugging(f"Browser kill failed: {e}", level="warning")

    async def _stop_process(self, process: asyncio.subprocess.Process, timeout: float = 5.0) -> None:
        if process.returncode is not None:
            return
        with contextlib.suppress(ProcessLookupError):
            process.terminate()
        try:
            await asyncio.wait_for(process.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await self._best_effort(process.wait(), "reap browser process")

    async def _best_effort(self, awaitable: Awaitable[Any], what: str) -> None:
        try:
            await awaitable
        except Exception as e:
            logError(ErrorIds.BROWSER_SHUTDOWN_FAILED, f"Failed to {what}: {e}")
