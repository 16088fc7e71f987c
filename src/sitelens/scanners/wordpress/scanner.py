"""WordPress fingerprinting and security analyzer."""

import asyncio
import re
import time
from datetime import datetime

from sitelens.models import (
    FetchedPage,
    FindingType,
    ProbeResult,
    SecurityFinding,
    Severity,
    WordPressProfile,
    WordPressScanResult,
)
from sitelens.scanners.base import BaseScanner
from sitelens.scanners.wordpress.fingerprint import (
    detect_wordpress,
    extract_plugins,
    extract_theme,
    extract_version,
    parse_version,
)

# Known vulnerable releases, matched by version prefix
VULNERABLE_VERSIONS = [
    ("6.3.0", "CVE-2023-38000"),
    ("6.2.0", "CVE-2023-2745"),
    ("6.1.0", "CVE-2023-2745"),
    ("6.0.0", "CVE-2022-43497"),
]

# Releases below this (major, minor) are reported as outdated
MIN_CURRENT_VERSION = (6, 4)

SENSITIVE_FILES = [
    "/wp-config.php",
    "/wp-config.php.bak",
    "/wp-config.php.old",
    "/wp-config.php.save",
    "/.wp-config.php.swp",
    "/wp-admin/setup-config.php",
    "/wp-content/debug.log",
    "/wp-includes/wp-config.php",
    "/wordpress/wp-config.php",
    "/wp/wp-config.php",
    "/blog/wp-config.php",
    "/wp-content/uploads/.htaccess",
    "/readme.html",
    "/license.txt",
    "/wp-admin/install.php",
    "/wp-admin/upgrade.php",
]

XMLRPC_LIST_METHODS = (
    '<?xml version="1.0"?>'
    "<methodCall><methodName>system.listMethods</methodName></methodCall>"
)

DIRECTORY_LISTING_MARKERS = (
    "Index of /",
    "Directory Listing",
    "<title>Index of",
    "Parent Directory",
    "[DIR]",
)

DEBUG_MARKERS = (
    "WP_DEBUG",
    "wp-content/debug.log",
    "Notice: ",
    "Warning: ",
    "Fatal error:",
    "wp_debug",
)

STRUCTURE_PATHS = (
    "/wp-content/plugins/",
    "/wp-content/themes/",
    "/wp-includes/",
)

# A directory counts as disclosed when a named entry follows it
STRUCTURE_PATTERNS = [
    (path, re.compile(re.escape(path) + r"[^/\s\"']+", re.IGNORECASE))
    for path in STRUCTURE_PATHS
]


class WordPressAnalyzer(BaseScanner[WordPressScanResult]):
    """WordPress detection, enumeration and misconfiguration checks."""

    @property
    def name(self) -> str:
        return "wordpress"

    async def scan(self, page: FetchedPage) -> WordPressScanResult:
        """Analyze a fetched page; probes only run for WordPress sites."""
        start_time = time.time()
        result = WordPressScanResult(target=page.url)

        if not detect_wordpress(page.html, page.headers):
            self.logger.debug("wordpress_not_detected", target=page.url)
            return result

        self.logger.info("wordpress_scan_started", target=page.url)

        version = extract_version(page.html)
        findings: list[SecurityFinding] = []

        is_outdated: bool | None = None
        if version:
            version_findings = self.check_version(version)
            findings.extend(version_findings)
            is_outdated = bool(version_findings)

        file_probes, admin, xmlrpc, user_enum = await asyncio.gather(
            asyncio.gather(
                *(self._probe_file(page.base_url, path) for path in SENSITIVE_FILES)
            ),
            self.run_probe("wp_admin", lambda: self._check_admin(page.base_url)),
            self.run_probe("xmlrpc", lambda: self._check_xmlrpc(page.base_url)),
            self.run_probe("user_enum", lambda: self._check_user_enum(page.base_url)),
        )
        probes = [*file_probes, admin, xmlrpc, user_enum]
        result.probe_errors = [f"{p.name}: {p.error}" for p in probes if p.failed]

        exposed_files = []
        for path, probe in zip(SENSITIVE_FILES, file_probes):
            if probe.detected:
                exposed_files.append(path)
                findings.append(self._exposed_file_finding(page.base_url, path))

        if admin.detected:
            findings.append(
                SecurityFinding(
                    type=FindingType.CONFIG,
                    severity=Severity.MEDIUM,
                    title="WordPress Admin Area Accessible",
                    description="WordPress admin area is accessible without proper protection.",
                    evidence=admin.evidence,
                    recommendation=(
                        "Consider implementing IP restrictions, two-factor "
                        "authentication, or admin area protection."
                    ),
                )
            )

        if xmlrpc.detected:
            findings.append(
                SecurityFinding(
                    type=FindingType.CONFIG,
                    severity=Severity.MEDIUM,
                    title="XML-RPC Enabled",
                    description=(
                        "WordPress XML-RPC is enabled and can be used for brute force attacks."
                    ),
                    evidence=xmlrpc.evidence,
                    recommendation=(
                        "Disable XML-RPC if not needed, or implement rate limiting "
                        "and authentication."
                    ),
                )
            )

        if user_enum.detected:
            findings.append(
                SecurityFinding(
                    type=FindingType.USER_ENUM,
                    severity=Severity.LOW,
                    title="User Enumeration Possible",
                    description="WordPress allows user enumeration through author archives.",
                    evidence=user_enum.evidence,
                    recommendation=(
                        "Disable user enumeration by redirecting author pages or "
                        "using security plugins."
                    ),
                )
            )

        directory_listing = self._has_directory_listing(page.html)
        if directory_listing:
            findings.append(
                SecurityFinding(
                    type=FindingType.CONFIG,
                    severity=Severity.MEDIUM,
                    title="Directory Listing Enabled",
                    description="Server allows directory listing which can expose sensitive files.",
                    recommendation="Disable directory listing in web server configuration.",
                )
            )

        findings.extend(self._structure_disclosure(page.html))

        debug_mode = self._has_debug_output(page.html)
        if debug_mode:
            findings.append(
                SecurityFinding(
                    type=FindingType.CONFIG,
                    severity=Severity.MEDIUM,
                    title="WordPress Debug Mode Enabled",
                    description=(
                        "WordPress debug mode is enabled, potentially exposing "
                        "sensitive information."
                    ),
                    recommendation=(
                        "Disable debug mode in production by setting WP_DEBUG to "
                        "false in wp-config.php."
                    ),
                )
            )

        result.profile = WordPressProfile(
            is_wordpress=True,
            version=version,
            theme=extract_theme(page.html),
            plugins=tuple(extract_plugins(page.html)),
            is_version_outdated=is_outdated,
            exposed_files=tuple(exposed_files),
            admin_accessible=admin.detected,
            xmlrpc_enabled=xmlrpc.detected,
            user_enumeration_possible=user_enum.detected,
            directory_listing_enabled=directory_listing,
            debug_mode_enabled=debug_mode,
        )
        result.findings = findings
        result.scanned_at = datetime.utcnow()
        result.duration_seconds = time.time() - start_time

        self.logger.info(
            "wordpress_scan_completed",
            target=page.url,
            version=version,
            plugins=result.profile.plugin_count,
            findings=len(findings),
            probe_errors=len(result.probe_errors),
            duration=result.duration_seconds,
        )

        return result

    def check_version(self, version: str) -> list[SecurityFinding]:
        """Known-vulnerable and outdated release checks for a version string."""
        findings = []

        for prefix, cve in VULNERABLE_VERSIONS:
            if version.startswith(prefix):
                findings.append(
                    SecurityFinding(
                        type=FindingType.VERSION,
                        severity=Severity.HIGH,
                        title=f"Vulnerable WordPress Version: {version}",
                        description=(
                            f"WordPress version {version} contains known security "
                            "vulnerabilities."
                        ),
                        evidence=f"Version: {version}",
                        recommendation=(
                            "Update WordPress to the latest stable version immediately."
                        ),
                        cve_id=cve,
                        cvss_score=8.5,
                    )
                )
                break

        parsed = parse_version(version)
        if parsed is not None:
            major, minor = parsed
            min_major, min_minor = MIN_CURRENT_VERSION
            if major < min_major or (
                major == min_major and minor is not None and minor < min_minor
            ):
                findings.append(
                    SecurityFinding(
                        type=FindingType.VERSION,
                        severity=Severity.MEDIUM,
                        title="Outdated WordPress Version",
                        description=(
                            f"WordPress version {version} is outdated and may contain "
                            "security vulnerabilities."
                        ),
                        evidence=f"Version: {version}",
                        recommendation=(
                            "Update WordPress to the latest stable version for "
                            "security patches and improvements."
                        ),
                    )
                )

        return findings

    async def _probe_file(self, base_url: str, path: str) -> ProbeResult:
        async def probe() -> ProbeResult:
            response = await self.http.head(
                f"{base_url}{path}", timeout=self.settings.probe_timeout
            )
            return ProbeResult(
                name=f"file:{path}",
                detected=response.is_success,
                status_code=response.status_code,
            )

        return await self.run_probe(f"file:{path}", probe)

    def _exposed_file_finding(self, base_url: str, path: str) -> SecurityFinding:
        if "wp-config" in path:
            severity = Severity.CRITICAL
        elif "debug.log" in path:
            severity = Severity.HIGH
        else:
            severity = Severity.MEDIUM

        if severity == Severity.CRITICAL:
            recommendation = (
                "Immediately restrict access to wp-config.php files using "
                ".htaccess or server configuration."
            )
        else:
            recommendation = (
                "Restrict access to sensitive files and disable debug logging "
                "in production."
            )

        return SecurityFinding(
            type=FindingType.FILE,
            severity=severity,
            title=f"Exposed Sensitive File: {path}",
            description=(
                f"Sensitive WordPress file {path} is accessible and may contain "
                "configuration data or debug information."
            ),
            evidence=f"File accessible at: {base_url}{path}",
            recommendation=recommendation,
        )

    async def _check_admin(self, base_url: str) -> ProbeResult:
        url = f"{base_url}/wp-admin/"
        response = await self.http.get(
            url,
            timeout=self.settings.probe_request_timeout,
            follow_redirects=False,
        )
        return ProbeResult(
            name="wp_admin",
            detected=response.status_code == 200,
            status_code=response.status_code,
            evidence=f"GET {url} returned {response.status_code}",
        )

    async def _check_xmlrpc(self, base_url: str) -> ProbeResult:
        url = f"{base_url}/xmlrpc.php"
        response = await self.http.post(
            url,
            content=XMLRPC_LIST_METHODS,
            headers={"Content-Type": "text/xml"},
            timeout=self.settings.probe_request_timeout,
        )
        return ProbeResult(
            name="xmlrpc",
            detected=response.is_success,
            status_code=response.status_code,
            evidence=f"POST {url} returned {response.status_code}",
        )

    async def _check_user_enum(self, base_url: str) -> ProbeResult:
        response = await self.http.get(
            f"{base_url}/?author=1",
            timeout=self.settings.probe_request_timeout,
            follow_redirects=False,
        )
        location = response.headers.get("location", "")
        detected = response.status_code in (301, 302) and "/author/" in location
        return ProbeResult(
            name="user_enum",
            detected=detected,
            status_code=response.status_code,
            evidence=f"Redirects to {location}" if detected else None,
        )

    def _has_directory_listing(self, html: str) -> bool:
        return any(marker in html for marker in DIRECTORY_LISTING_MARKERS)

    def _has_debug_output(self, html: str) -> bool:
        return any(marker in html for marker in DEBUG_MARKERS)

    def _structure_disclosure(self, html: str) -> list[SecurityFinding]:
        """One low finding per WordPress directory visible in the source."""
        findings = []
        for path, pattern in STRUCTURE_PATTERNS:
            if not pattern.search(html):
                continue
            findings.append(
                SecurityFinding(
                    type=FindingType.CONFIG,
                    severity=Severity.LOW,
                    title="WordPress Structure Information Disclosure",
                    description=(
                        "WordPress directory structure is exposed in HTML source, "
                        f"revealing {path} contents."
                    ),
                    recommendation=(
                        "Consider using security plugins to hide WordPress structure "
                        "information."
                    ),
                )
            )
        return findings

