#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Built-in fallbacks for the VAPT runner's header grab and DNS lookups.

Used only with --builtin-fallbacks, when curl or dig is not installed.

---------------------------------------------------------------------------
WHAT THIS MODULE DOES:
---------------------------------------------------------------------------
  fetch_headers(url)        – Same information as `curl -Is <url>`: the status
                              line and every response header, no redirects.
  dns_records(domain, ...)  – Looks up a set of record types with dnspython,
                              roughly what `dig <domain> ANY +noall +answer`
                              shows (ANY is refused by most resolvers today,
                              so the common types are queried one by one).

Network errors never raise. They end up as text in the returned output so
the runner can save them exactly like it saves a failing tool's output.
---------------------------------------------------------------------------
"""

import sys

try:
    import requests
    import dns.resolver
    import dns.exception
except ImportError:
    print("[!] Missing dependencies. Run: pip install requests dnspython")
    sys.exit(1)

# Test targets often have self-signed or expired certificates.
requests.packages.urllib3.disable_warnings()


HTTP_TIMEOUT = 8  # Seconds to wait for a server response
DNS_TIMEOUT = 4   # Seconds per DNS query, retries included
USER_AGENT = "Mozilla/5.0 (compatible; VaptRunner/1.0)"

SESSION = requests.Session()
SESSION.headers.update({"User-Agent": USER_AGENT})
SESSION.verify = False

# Same record types dig's ANY answer would usually carry.
DNS_RECORD_TYPES = ["A", "AAAA", "MX", "NS", "TXT", "CNAME", "SOA"]

HTTP_VERSIONS = {10: "HTTP/1.0", 11: "HTTP/1.1", 20: "HTTP/2"}


def fetch_headers(url):
    """
    HEAD the URL without following redirects and return the response as
    curl -I prints it: "HTTP/1.1 200 OK" followed by "Name: value" lines.
    On a network error the error message is returned instead.
    """
    try:
        r = SESSION.head(url, timeout=HTTP_TIMEOUT, allow_redirects=False)
    except requests.exceptions.RequestException as exc:
        return f"Request to {url} failed: {exc}\n"

    version = HTTP_VERSIONS.get(getattr(r.raw, "version", 11), "HTTP/1.1")
    lines = [f"{version} {r.status_code} {r.reason or ''}".rstrip()]
    lines += [f"{name}: {value}" for name, value in r.headers.items()]
    return "\n".join(lines) + "\n"


def dns_records(domain, types=None):
    """
    Return (records, errors) for `domain`: records is a list of
    (record_type, value) pairs, errors a list of "TYPE: message" strings.

    NXDOMAIN and NoAnswer just mean that record type has nothing to show,
    so they are skipped. Anything else (timeouts, no reachable nameserver)
    is a failed lookup and ends up in errors.
    """
    resolver = dns.resolver.Resolver()
    resolver.timeout = DNS_TIMEOUT
    resolver.lifetime = DNS_TIMEOUT

    found, errors = [], []
    for rtype in types or DNS_RECORD_TYPES:
        try:
            answers = resolver.resolve(domain, rtype)
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
            continue
        except dns.exception.DNSException as exc:
            errors.append(f"{rtype}: {exc}")
            continue
        found += [(rtype, str(rdata)) for rdata in answers]
    return found, errors


def format_records(domain, records, errors=()):
    if not records and not errors:
        return f"No DNS records found for {domain}.\n"
    # :<6 keeps the record type column aligned like dig's answer section
    lines = [f"{domain}.\t{rtype:<6}  {value}\n" for rtype, value in records]
    lines += [f";; {err}\n" for err in errors]
    return "".join(lines)
