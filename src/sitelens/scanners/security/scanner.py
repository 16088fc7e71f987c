"""Web security scanner: headers, TLS posture, exposed paths and disclosure."""

import asyncio
import re
import time
from collections.abc import Iterable
from datetime import datetime

import httpx

from sitelens.models import (
    FetchedPage,
    FindingType,
    ProbeResult,
    SecurityFinding,
    Severity,
    SSLAnalysis,
    WebSecurityResult,
)
from sitelens.scanners.base import BaseScanner

# Checked in this order; "expected" is set for headers with a required value
SECURITY_HEADERS = {
    "strict-transport-security": {
        "severity": Severity.HIGH,
        "expected": None,
        "description": "HTTP Strict Transport Security (HSTS) is missing",
        "recommendation": (
            "Add HSTS header to force HTTPS connections and prevent downgrade attacks"
        ),
    },
    "content-security-policy": {
        "severity": Severity.HIGH,
        "expected": None,
        "description": "Content Security Policy (CSP) is missing",
        "recommendation": "Implement CSP header to prevent XSS and data injection attacks",
    },
    "x-frame-options": {
        "severity": Severity.MEDIUM,
        "expected": None,
        "description": "X-Frame-Options header is missing",
        "recommendation": "Add X-Frame-Options header to prevent clickjacking attacks",
    },
    "x-content-type-options": {
        "severity": Severity.MEDIUM,
        "expected": "nosniff",
        "description": "X-Content-Type-Options header is missing",
        "recommendation": "Add X-Content-Type-Options: nosniff to prevent MIME type sniffing",
    },
    "referrer-policy": {
        "severity": Severity.LOW,
        "expected": None,
        "description": "Referrer-Policy header is missing",
        "recommendation": "Add Referrer-Policy header to control referrer information",
    },
    "permissions-policy": {
        "severity": Severity.LOW,
        "expected": None,
        "description": "Permissions-Policy header is missing",
        "recommendation": "Add Permissions-Policy header to control browser features",
    },
    "x-xss-protection": {
        "severity": Severity.LOW,
        "expected": "1; mode=block",
        "description": "X-XSS-Protection header is missing or misconfigured",
        "recommendation": "Add X-XSS-Protection: 1; mode=block header",
    },
}

COMMON_PATHS = [
    "/.env",
    "/.git/",
    "/.svn/",
    "/admin",
    "/administrator",
    "/backup",
    "/config",
    "/database",
    "/db",
    "/debug",
    "/logs",
    "/phpinfo.php",
    "/server-status",
    "/server-info",
    "/.htaccess",
    "/robots.txt",
    "/sitemap.xml",
]

DIRECTORY_LISTING_MARKERS = ("Index of /", "Directory Listing", "[DIR]")

TRAVERSAL_PAYLOADS = [
    "../../../etc/passwd",
    "..\\..\\..\\windows\\system32\\drivers\\etc\\hosts",
    "....//....//....//etc/passwd",
]

TRAVERSAL_MARKERS = ("root:", "localhost", "# Copyright")

WEAK_TLS_MARKERS = ("TLS/1.0", "TLS/1.1")

SERVER_PRODUCTS = ("Apache", "nginx", "IIS")
SERVER_VERSION_PATTERN = re.compile(r"(\d+\.\d+)")

TECH_DISCLOSURE_PATTERNS = [
    ("Technology Stack", re.compile(r"powered by [^<\n]+", re.IGNORECASE)),
    ("Framework Information", re.compile(r"built with [^<\n]+", re.IGNORECASE)),
    ("Generator Meta Tag", re.compile(r'generator.*content="[^"]+"', re.IGNORECASE)),
    ("X-Powered-By Header", re.compile(r"X-Powered-By", re.IGNORECASE)),
]

# Single-line HTML comments only
COMMENT_PATTERNS = [
    re.compile(r"<!--.*?password.*?-->", re.IGNORECASE),
    re.compile(r"<!--.*?secret.*?-->", re.IGNORECASE),
    re.compile(r"<!--.*?api[_-]?key.*?-->", re.IGNORECASE),
    re.compile(r"<!--.*?token.*?-->", re.IGNORECASE),
]


def calculate_security_score(findings: Iterable[SecurityFinding]) -> int:
    """100 minus the severity weight of every finding, clamped to [0, 100]."""
    score = 100 - sum(finding.severity.weight for finding in findings)
    return max(0, min(100, score))


class WebSecurityScanner(BaseScanner[WebSecurityResult]):
    """Heuristic web security assessment of a fetched page."""

    @property
    def name(self) -> str:
        return "security"

    async def scan(self, page: FetchedPage) -> WebSecurityResult:
        """Run all checks against the page and compute the security score."""
        start_time = time.time()
        self.logger.info("security_scan_started", target=page.url)

        result = WebSecurityResult(target=page.url)
        findings: list[SecurityFinding] = []

        missing, header_findings = self.analyze_headers(page.headers)
        result.missing_headers = missing
        findings.extend(header_findings)

        ssl_analysis, ssl_findings = self.analyze_tls(page)
        result.ssl_analysis = ssl_analysis
        findings.extend(ssl_findings)

        path_probes, traversal = await asyncio.gather(
            asyncio.gather(*(self._probe_path(page.base_url, path) for path in COMMON_PATHS)),
            self._test_directory_traversal(page.url),
        )
        for path, probe in zip(COMMON_PATHS, path_probes):
            if probe.detected:
                result.exposed_paths.append(path)
                findings.append(self._exposed_path_finding(page.base_url, path))

        if any(marker in page.html for marker in DIRECTORY_LISTING_MARKERS):
            findings.append(
                SecurityFinding(
                    type=FindingType.DIRECTORY_LISTING,
                    severity=Severity.MEDIUM,
                    title="Directory Listing Enabled",
                    description=(
                        "Web server allows directory browsing which can expose "
                        "sensitive files"
                    ),
                    recommendation="Disable directory listing in web server configuration",
                )
            )

        if traversal.detected:
            result.vulnerability_tests.directory_traversal = True
            findings.append(
                SecurityFinding(
                    type=FindingType.INJECTION,
                    severity=Severity.CRITICAL,
                    title="Directory Traversal Vulnerability",
                    description="Application is vulnerable to directory traversal attacks",
                    evidence=traversal.evidence,
                    recommendation="Implement proper input validation and sanitization",
                    cvss_score=9.1,
                )
            )

        findings.extend(self.check_information_disclosure(page.html, page.headers))

        result.probe_errors = [
            f"{p.name}: {p.error}" for p in [*path_probes, traversal] if p.failed
        ]
        result.findings = findings
        result.security_score = calculate_security_score(findings)
        result.scanned_at = datetime.utcnow()
        result.duration_seconds = time.time() - start_time

        self.logger.info(
            "security_scan_completed",
            target=page.url,
            score=result.security_score,
            findings=len(findings),
            missing_headers=len(missing),
            probe_errors=len(result.probe_errors),
            duration=result.duration_seconds,
        )

        return result

    def analyze_headers(
        self, headers: dict[str, str]
    ) -> tuple[list[str], list[SecurityFinding]]:
        """Check presence and expected values of recommended headers."""
        normalized = {k.lower(): v for k, v in headers.items()}
        missing = []
        findings = []

        for header_key, header_info in SECURITY_HEADERS.items():
            if header_key not in normalized:
                missing.append(header_key)
                findings.append(
                    SecurityFinding(
                        type=FindingType.SECURITY_HEADER,
                        severity=header_info["severity"],
                        title=f"Missing Security Header: {header_key}",
                        description=header_info["description"],
                        recommendation=header_info["recommendation"],
                    )
                )
                continue

            expected = header_info["expected"]
            value = normalized[header_key]
            if expected is not None and value != expected:
                findings.append(
                    SecurityFinding(
                        type=FindingType.SECURITY_HEADER,
                        severity=Severity.MEDIUM,
                        title=f"Misconfigured Security Header: {header_key}",
                        description=f"{header_key} header exists but may be misconfigured",
                        evidence=f"Current value: {value}",
                        recommendation=f"Set {header_key} to: {expected}",
                    )
                )

        return missing, findings

    def analyze_tls(self, page: FetchedPage) -> tuple[SSLAnalysis, list[SecurityFinding]]:
        """Infer TLS posture from the URL scheme and response headers.

        No handshake is performed; the version check only reads the Server
        banner.
        """
        analysis = SSLAnalysis(
            has_ssl=page.is_https,
            hsts="strict-transport-security" in page.headers,
        )
        findings = []

        if not page.is_https:
            findings.append(
                SecurityFinding(
                    type=FindingType.SSL_TLS,
                    severity=Severity.HIGH,
                    title="No SSL/TLS Encryption",
                    description="Website is not using HTTPS encryption",
                    recommendation=(
                        "Implement SSL/TLS certificate and redirect all HTTP traffic to HTTPS"
                    ),
                )
            )
            return analysis, findings

        csp = page.header("content-security-policy")
        if "upgrade-insecure-requests" in csp:
            analysis.mixed_content_mitigation = True
            findings.append(
                SecurityFinding(
                    type=FindingType.SSL_TLS,
                    severity=Severity.MEDIUM,
                    title="Mixed Content Detected",
                    description="Website may be loading insecure content over HTTP",
                    recommendation="Ensure all resources are loaded over HTTPS",
                )
            )

        server = page.header("server")
        weak = next((marker for marker in WEAK_TLS_MARKERS if marker in server), None)
        if weak:
            analysis.weak_ciphers = True
            analysis.tls_version = weak
            findings.append(
                SecurityFinding(
                    type=FindingType.SSL_TLS,
                    severity=Severity.HIGH,
                    title="Weak TLS Configuration",
                    description="Server may be using outdated TLS versions",
                    evidence=f"Server: {server}",
                    recommendation="Upgrade to TLS 1.2 or higher and disable weak cipher suites",
                )
            )

        return analysis, findings

    def check_information_disclosure(
        self, html: str, headers: dict[str, str]
    ) -> list[SecurityFinding]:
        findings = []

        server = headers.get("server", "")
        if any(product in server for product in SERVER_PRODUCTS) and (
            SERVER_VERSION_PATTERN.search(server)
        ):
            findings.append(
                SecurityFinding(
                    type=FindingType.INFORMATION_DISCLOSURE,
                    severity=Severity.LOW,
                    title="Server Version Disclosure",
                    description="Web server version information is exposed in HTTP headers",
                    evidence=f"Server: {server}",
                    recommendation="Hide server version information in HTTP headers",
                )
            )

        for name, pattern in TECH_DISCLOSURE_PATTERNS:
            match = pattern.search(html)
            if match:
                findings.append(
                    SecurityFinding(
                        type=FindingType.INFORMATION_DISCLOSURE,
                        severity=Severity.LOW,
                        title=f"{name} Disclosure",
                        description="Technology information is exposed which could aid attackers",
                        evidence=match.group(0),
                        recommendation=(
                            "Remove or obfuscate technology stack information from "
                            "HTML and headers"
                        ),
                    )
                )

        for pattern in COMMENT_PATTERNS:
            if pattern.search(html):
                findings.append(
                    SecurityFinding(
                        type=FindingType.INFORMATION_DISCLOSURE,
                        severity=Severity.MEDIUM,
                        title="Sensitive Information in Comments",
                        description="HTML comments may contain sensitive information",
                        recommendation=(
                            "Remove sensitive information from HTML comments before deployment"
                        ),
                    )
                )

        return findings

    async def _probe_path(self, base_url: str, path: str) -> ProbeResult:
        async def probe() -> ProbeResult:
            response = await self.http.head(
                f"{base_url}{path}", timeout=self.settings.probe_timeout
            )
            return ProbeResult(
                name=f"path:{path}",
                detected=response.is_success,
                status_code=response.status_code,
            )

        return await self.run_probe(f"path:{path}", probe)

    def _exposed_path_finding(self, base_url: str, path: str) -> SecurityFinding:
        if ".env" in path or "config" in path:
            severity = Severity.CRITICAL
        elif "admin" in path or ".git" in path:
            severity = Severity.HIGH
        else:
            severity = Severity.MEDIUM

        if severity == Severity.CRITICAL:
            recommendation = (
                "Immediately restrict access to configuration files and environment variables"
            )
        else:
            recommendation = "Restrict access to sensitive directories and files"

        return SecurityFinding(
            type=FindingType.INFORMATION_DISCLOSURE,
            severity=severity,
            title=f"Exposed Path: {path}",
            description=(
                f"Sensitive path {path} is accessible and may contain confidential information"
            ),
            evidence=f"Accessible at: {base_url}{path}",
            recommendation=recommendation,
        )

    async def _test_directory_traversal(self, url: str) -> ProbeResult:
        """Replace every query value with traversal payloads; first hit wins.

        Payloads run sequentially. A failed payload request moves on to the
        next payload.
        """
        target = httpx.URL(url)
        if not target.query:
            return ProbeResult(name="directory_traversal")

        keys = list(dict.fromkeys(target.params.keys()))
        errors = []
        for payload in TRAVERSAL_PAYLOADS:
            test_url = target.copy_with(params={key: payload for key in keys})

            async def probe(
                test_url: httpx.URL = test_url, payload: str = payload
            ) -> ProbeResult:
                response = await self.http.get(
                    test_url, timeout=self.settings.probe_request_timeout
                )
                body = response.text
                return ProbeResult(
                    name="directory_traversal",
                    detected=any(marker in body for marker in TRAVERSAL_MARKERS),
                    status_code=response.status_code,
                    evidence=f"Payload: {payload}",
                )

            outcome = await self.run_probe("directory_traversal", probe)
            if outcome.detected:
                return outcome
            if outcome.failed:
                errors.append(outcome.error)

        # Report an error only when no payload request succeeded
        if len(errors) == len(TRAVERSAL_PAYLOADS):
            return ProbeResult(name="directory_traversal", error=errors[-1])
        return ProbeResult(name="directory_traversal")
