"""Render a factory's supply graph with graphviz."""

import graphviz

from factory import Factory


def _node_id(index: int) -> str:
    return f"Stream_{index}"


def _add_stream_nodes(dot: graphviz.Digraph, factory: Factory) -> None:
    """Add one node per stream.

    Precondition:
        dot is a graphviz.Digraph
        factory graph is acyclic

    Postcondition:
        every stream has a node labelled with its name, multiplier and
        efficiency; leaf streams are shaded green, named streams blue

    Args:
        dot: graph to add nodes to
        factory: factory whose streams are drawn
    """
    named = set(factory.streams.values())
    for index, stream in enumerate(factory.arena):
        efficiency = factory.arena.efficiency(index)
        label = f"{factory.stream_name(index)} x{stream.mult}\n{efficiency:.0%}"
        if stream.is_leaf():
            fillcolor = "lightgreen"
        elif index in named:
            fillcolor = "lightblue"
        else:
            fillcolor = "white"
        dot.node(_node_id(index), label, shape="box", style="filled", fillcolor=fillcolor)


def _add_supply_edges(dot: graphviz.Digraph, factory: Factory) -> None:
    """Add one edge per input slot, labelled with the product and its realized rate."""
    for index, stream in enumerate(factory.arena):
        for product, upstream_index in stream.inputs:
            rate = factory.arena.rate_of(upstream_index, product)
            name = factory.product_names[product]
            label = f"{name}\n{rate}" if rate is not None else name
            color = "black" if rate is not None else "red"
            dot.edge(_node_id(upstream_index), _node_id(index), label=label, color=color)


def stream_graph(factory: Factory) -> graphviz.Digraph:
    """Build a graphviz diagram of a factory's streams.

    Args:
        factory: factory to draw

    Returns:
        Digraph with suppliers to the left of their consumers
    """
    dot = graphviz.Digraph()
    dot.attr(rankdir="LR")
    _add_stream_nodes(dot, factory)
    _add_supply_edges(dot, factory)
    return dot
