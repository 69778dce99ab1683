"""
aggregator.py
- Groups probe results by network, then by node.
- Output is independent of input order so reports stay diffable across cycles.
"""

from collections import defaultdict

from lib.netcheck.models import ProbeKind


def _result_key(result):
    return (result.service, result.kind.value, result.detail, result.success)


def group_results(results):
    """
    Build a GroupedReport: {network: {node: [ProbeResult, ...]}}.

    Results within a node are sorted by service name. Ties are broken on kind, detail
    and success so shuffled input always produces the same report.
    """
    grouped = defaultdict(lambda: defaultdict(list))
    for result in results:
        grouped[result.network][result.node].append(result)

    return {
        network: {node: sorted(node_results, key=_result_key) for node, node_results in nodes.items()}
        for network, nodes in grouped.items()
    }


def split_by_kind(results):
    """Separate results into (dns, get) lists, preserving order."""
    dns = [r for r in results if r.kind == ProbeKind.DNS]
    get = [r for r in results if r.kind == ProbeKind.GET]
    return dns, get


def distinct_services(grouped):
    """All service names present anywhere in a GroupedReport, sorted."""
    return sorted({
        result.service
        for nodes in grouped.values()
        for node_results in nodes.values()
        for result in node_results
    })


def unexpected_nodes(results, known_nodes):
    """Node identities reported by the probe that the cluster never listed."""
    known = set(known_nodes)
    return sorted({r.node for r in results if r.node not in known})
