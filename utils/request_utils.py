"""
Receipegram Request Utilities
Helper functions for extracting request information
"""

from fastapi import Request
from typing import Dict
import ipaddress

# Header names whose values must never reach the logs
SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key", "x-auth-token"}


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request headers

    Handles common proxy configurations and load balancers
    """
    headers_to_check = [
        "cf-connecting-ip",  # Cloudflare
        "x-forwarded-for",   # Standard proxy header
        "x-real-ip",         # Nginx proxy
    ]

    for header in headers_to_check:
        ip = request.headers.get(header)
        if ip:
            # X-Forwarded-For can contain multiple IPs, take the first (original client)
            if "," in ip:
                ip = ip.split(",")[0].strip()

            if _is_valid_ip(ip):
                return ip

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


def get_user_agent(request: Request) -> str:
    """Extract user agent from request headers"""
    return request.headers.get("user-agent", "Unknown")


def filter_headers(headers: Dict[str, str]) -> Dict[str, str]:
    """Mask sensitive headers before logging"""
    return {
        key: "***MASKED***" if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


def _is_valid_ip(ip: str) -> bool:
    """Validate IP address format"""
    try:
        ipaddress.ip_address(ip)
        return True
    except ValueError:
        return False
