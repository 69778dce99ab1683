"""
result_parser.py
- Turns raw probe task output into ProbeResult values.
- Line grammar: node:TYPE:service[:info1[:info2]]
- Lenient by design: unknown types, blank and garbled lines yield nothing and never raise.
"""

from loguru import logger

from lib.netcheck.models import ProbeKind, ProbeResult

DNS_SUCCESS = "DNS_SUCCESS"
DNS_NO_IPS = "DNS_NO_IPS"
DNS_FAIL = "DNS_FAIL"
GET_SUCCESS = "GET_SUCCESS"
GET_HTTP_FAIL = "GET_HTTP_FAIL"
GET_FAIL = "GET_FAIL"

NO_IP_DETAIL = "no IP"


def _timed(info1, info2):
    return f"{info1},{info2}s"


# TYPE -> (kind, success, detail builder)
LINE_TYPES = {
    DNS_SUCCESS: (ProbeKind.DNS, True, lambda info1, info2: info1),
    DNS_NO_IPS: (ProbeKind.DNS, False, lambda info1, info2: NO_IP_DETAIL),
    DNS_FAIL: (ProbeKind.DNS, False, lambda info1, info2: info1),
    GET_SUCCESS: (ProbeKind.GET, True, _timed),
    GET_HTTP_FAIL: (ProbeKind.GET, False, _timed),
    GET_FAIL: (ProbeKind.GET, False, lambda info1, info2: info1),
}


def parse_line(line, network):
    """
    Parse one line of probe output.

    Args:
        line (str): Raw output line.
        network (str): Network the emitting task group was attached to.

    Returns:
        ProbeResult or None: None for blank, short, or unrecognized lines.
    """
    if not line or not line.strip():
        return None

    parts = line.rstrip("\r\n").split(":")
    if len(parts) < 3:
        return None

    node, line_type, service = parts[0].strip(), parts[1].strip(), parts[2].strip()
    entry = LINE_TYPES.get(line_type)
    if entry is None or not node or not service:
        return None

    info1 = parts[3] if len(parts) > 3 else ""
    info2 = parts[4] if len(parts) > 4 else ""

    kind, success, detail = entry
    return ProbeResult(
        network=network,
        node=node,
        service=service,
        kind=kind,
        detail=detail(info1, info2),
        success=success,
    )


def _missing_node(line):
    parts = line.split(":")
    return len(parts) >= 3 and not parts[0].strip() and parts[1].strip() in LINE_TYPES


def parse_output(text, network):
    """Parse every line of a task's combined output, dropping the ones that don't match."""
    results = []
    discarded = 0
    nameless = 0
    for line in text.splitlines():
        if not line.strip():
            continue
        result = parse_line(line, network)
        if result is None:
            if _missing_node(line):
                nameless += 1
            else:
                discarded += 1
            continue
        results.append(result)

    if nameless:
        logger.warning(
            f"[parser] Dropped {nameless} {network} result line(s) with no node name (is NODE_NAME set in the checker image?)"
        )
    if discarded:
        logger.debug(f"[parser] Discarded {discarded} unrecognized line(s) from {network} output")
    return results
