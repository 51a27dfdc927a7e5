"""Email reachability verification."""

import asyncio
import hashlib
import logging
import smtplib
from typing import Any, Callable, List, Optional, Protocol
from uuid import uuid4

import dns.exception
import dns.resolver
import httpx
from email_validator import EmailNotValidError, validate_email

from mailbatch.config import Settings, get_settings
from mailbatch.models.job import Reachability, ValidationOptions
from mailbatch.utils.errors import VerificationError

logger = logging.getLogger(__name__)

GRAVATAR_URL = "https://www.gravatar.com/avatar/{digest}"

# RCPT replies that mean the mailbox does not exist
_REJECT_CODES = {550, 551, 552, 553}
_ACCEPT_CODES = {250, 251}


class ValidationCapability(Protocol):
    """Anything that can classify a single address."""

    async def verify(self, email: str, options: ValidationOptions) -> Reachability:
        """
        Classify one address.

        Raising signals that the attempt itself failed; the batch engine
        records that as an error outcome for the address.
        """
        ...


class EmailVerifier:
    """Default capability: syntax, MX, SMTP mailbox probe and Gravatar lookup."""

    def __init__(
        self,
        settings: Settings,
        resolver: Optional[Any] = None,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the EmailVerifier.

        Args:
            settings: Application settings (timeouts, SMTP identity)
            resolver: DNS resolver with a resolve(name, rdtype) method
            smtp_factory: Callable returning a connected smtplib.SMTP
            http_transport: Transport for Gravatar requests (tests)
        """
        self.settings = settings
        self._resolver = resolver
        self.smtp_factory = smtp_factory
        self.http_transport = http_transport

    @property
    def resolver(self) -> Any:
        """System resolver, created on first use."""
        if self._resolver is None:
            resolver = dns.resolver.Resolver()
            resolver.lifetime = self.settings.dns_timeout_seconds
            self._resolver = resolver
        return self._resolver

    async def verify(self, email: str, options: ValidationOptions) -> Reachability:
        """
        Classify an address.

        The verdict comes from the SMTP probe; without one it is "unknown".
        A Gravatar lookup is an identity signal only and is logged, never
        folded into the verdict.

        Raises:
            VerificationError: If the syntax is invalid or the probe fails
        """
        domain = self._parse_domain(email)
        if options.syntax_only:
            return "unknown"

        reachable: Reachability = "unknown"
        if options.smtp_check:
            reachable = await asyncio.to_thread(
                self._probe_mailbox, email, domain, options.catch_all_check
            )

        if options.gravatar_check:
            found = await self._has_gravatar(email)
            logger.debug(f"Gravatar profile for {email}: {'found' if found else 'none'}")

        return reachable

    def _parse_domain(self, email: str) -> str:
        try:
            parsed = validate_email(email, check_deliverability=False)
        except EmailNotValidError as e:
            raise VerificationError(f"invalid email syntax: {e}") from e
        return parsed.ascii_domain

    # ==================== DNS ====================

    def lookup_mx(self, domain: str) -> List[str]:
        """
        Return MX hosts for a domain, lowest preference first.

        An empty list means the domain does not accept mail.

        Raises:
            VerificationError: If the lookup fails for another reason
        """
        try:
            answer = self.resolver.resolve(domain, "MX")
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
            return []
        except dns.exception.DNSException as e:
            raise VerificationError(f"MX lookup failed for {domain}: {e}") from e

        records = sorted(answer, key=lambda r: r.preference)
        hosts = [str(r.exchange).rstrip(".") for r in records]
        # Null MX (RFC 7505)
        return [h for h in hosts if h]

    # ==================== SMTP ====================

    def _probe_mailbox(self, email: str, domain: str, catch_all_check: bool) -> Reachability:
        hosts = self.lookup_mx(domain)
        if not hosts:
            return "no"

        try:
            with self.smtp_factory(
                hosts[0],
                self.settings.smtp_port,
                local_hostname=self.settings.smtp_helo_name,
                timeout=self.settings.smtp_timeout_seconds,
            ) as smtp:
                smtp.ehlo_or_helo_if_needed()
                code, message = smtp.mail(self.settings.smtp_from_email)
                if code not in _ACCEPT_CODES:
                    raise VerificationError(
                        f"MAIL FROM rejected by {hosts[0]}: {code} {message!r}"
                    )

                if catch_all_check:
                    code, _ = smtp.rcpt(f"{uuid4().hex}@{domain}")
                    if code in _ACCEPT_CODES:
                        logger.debug(f"Domain {domain} accepts all recipients")
                        return "unknown"

                code, _ = smtp.rcpt(email)
        except (smtplib.SMTPException, OSError) as e:
            raise VerificationError(f"SMTP probe of {hosts[0]} failed: {e}") from e

        if code in _ACCEPT_CODES:
            return "yes"
        if code in _REJECT_CODES:
            return "no"
        return "unknown"

    # ==================== Gravatar ====================

    async def _has_gravatar(self, email: str) -> bool:
        digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.gravatar_timeout_seconds,
                transport=self.http_transport,
            ) as client:
                response = await client.get(GRAVATAR_URL.format(digest=digest), params={"d": "404"})
        except httpx.HTTPError as e:
            logger.warning(f"Gravatar lookup failed for {email}: {e}")
            return False
        return response.status_code == 200


def create_email_verifier(settings: Optional[Settings] = None) -> EmailVerifier:
    """
    Create an EmailVerifier using application settings.

    Returns:
        Configured EmailVerifier instance
    """
    return EmailVerifier(settings=settings or get_settings())
