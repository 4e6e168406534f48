from subgraph_checks.models import SchemaRef, SubgraphRef


def changed_subgraphs(base: SchemaRef, proposed: SchemaRef) -> list[SubgraphRef]:
    """Return the proposed subgraphs whose (name, hash) pair is not in *base*.

    New subgraphs count as changed, removed ones are not reported. Order
    follows ``proposed.subgraphs``.
    """
    unchanged = {(s.name, s.hash) for s in base.subgraphs or []}
    return [s for s in proposed.subgraphs or [] if (s.name, s.hash) not in unchanged]
