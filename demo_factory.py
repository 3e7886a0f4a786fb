"""A small electronic circuit production chain to experiment with."""

from bindings import PartRef, RecipeCall, StreamRef
from factory import Factory, FactoryConfig

PRODUCTS = [
    "Iron Ore",
    "Copper Ore",
    "Iron Plate",
    "Copper Plate",
    "Copper Cable",
    "Electronic Circuit",
]

# name -> (inputs, outputs, period in ticks)
RECIPES = {
    "iron_mining": ([], ["Iron Ore"], 2),
    "copper_mining": ([], ["Copper Ore"], 2),
    "iron_smelting": (["Iron Ore"], ["Iron Plate"], 4),
    "copper_smelting": (["Copper Ore"], ["Copper Plate"], 4),
    "copper_cable": (["Copper Plate"], [PartRef("Copper Cable", 2)], 1),
    "electronic_circuit": (["Iron Plate", PartRef("Copper Cable", 3)], ["Electronic Circuit"], 2),
}


def build_demo_factory(config: FactoryConfig | None = None) -> Factory:
    """Build the circuit factory.

    Streams:
        ironPlates: smelting fed by an anonymous iron mine
        copperCables: cable assembly fed by anonymous copper smelting and mining
        greenChips: circuits from ironPlates and copperCables

    Args:
        config: optional factory tunables

    Returns:
        Factory with every stream at x1, so greenChips starts supply-limited
    """
    factory = Factory(config)
    for name in PRODUCTS:
        factory.register_product(name)
    for name, (inputs, outputs, period) in RECIPES.items():
        factory.register_recipe(name, inputs, outputs, period)

    factory.register_stream(
        "ironPlates", RecipeCall("iron_smelting", [RecipeCall("iron_mining")])
    )
    factory.register_stream(
        "copperCables",
        RecipeCall("copper_cable", [RecipeCall("copper_smelting", [RecipeCall("copper_mining")])]),
    )
    factory.register_stream(
        "greenChips",
        RecipeCall("electronic_circuit", [StreamRef("ironPlates"), StreamRef("copperCables")]),
    )
    return factory


if __name__ == "__main__":
    demo = build_demo_factory()
    print(f"Green chips working at {demo.efficiency('greenChips') * 100:.1f}% efficiency")
    for stream, old_mult, new_mult in demo.solve("greenChips"):
        print(f"Scaled {stream} from x{old_mult} to x{new_mult}")
    print(f"Green chips working at {demo.efficiency('greenChips') * 100:.1f}% efficiency")
