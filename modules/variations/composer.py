"""Validation and assembly of a ProductVariation with its option combination."""

import logging
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence

from core.errors import ConflictException, ValidationAppException
from modules.costing.recalc import apply_final_price, check_stock
from modules.products.models import Product
from modules.variations.models import ProductVariation, VariationCombination, VariationOption

logger = logging.getLogger(__name__)


def option_set(variation: ProductVariation) -> FrozenSet[str]:
    return frozenset(c.variation_option_id for c in variation.combinations or [])


def resolve_options(selected_ids: Iterable[str], known: Dict[str, VariationOption]) -> List[VariationOption]:
    """Map the selection to options, at most one per variation type."""
    options: List[VariationOption] = []
    seen_ids = set()
    seen_types: Dict[str, str] = {}
    for option_id in selected_ids:
        if option_id in seen_ids:
            continue
        seen_ids.add(option_id)
        option = known.get(option_id)
        if option is None:
            raise ValidationAppException(f"Unknown variation option '{option_id}'", code="invalid_combination")
        if option.variation_type_id in seen_types:
            raise ValidationAppException(
                f"Options '{seen_types[option.variation_type_id]}' and '{option_id}' belong to the same variation type",
                code="invalid_combination",
            )
        seen_types[option.variation_type_id] = option_id
        options.append(option)
    return options


def _active_siblings(siblings: Sequence[ProductVariation], exclude_id: Optional[str]) -> List[ProductVariation]:
    return [s for s in siblings if s.is_active and (exclude_id is None or s.id != exclude_id)]


def ensure_unique_combination(
    option_ids: FrozenSet[str], siblings: Sequence[ProductVariation], exclude_id: Optional[str] = None
) -> None:
    for sibling in _active_siblings(siblings, exclude_id):
        if option_set(sibling) == option_ids:
            raise ConflictException(
                f"Variation '{sibling.name}' already uses this option combination",
                code="duplicate_variation",
            )


def ensure_unique_sku(sku: Optional[str], siblings: Sequence[ProductVariation], exclude_id: Optional[str] = None) -> None:
    if not sku:
        return
    for sibling in _active_siblings(siblings, exclude_id):
        if sibling.sku == sku:
            raise ConflictException(f"SKU '{sku}' is already used by variation '{sibling.name}'", code="duplicate_sku")


class VariationComposer:
    def __init__(self, known_options: Dict[str, VariationOption]):
        self.known_options = known_options

    def compose(
        self,
        product: Product,
        name: str,
        selected_option_ids: Iterable[str],
        price_adjustment: float = 0.0,
        stock_quantity: int = 0,
        sku: Optional[str] = None,
        siblings: Sequence[ProductVariation] = (),
    ) -> ProductVariation:
        """Validate the request and build an unsaved variation with its combinations.

        Checks run before anything is built: stock, option resolution, one
        option per type, then uniqueness against the product's active
        variations.
        """
        check_stock(stock_quantity)
        sku = (sku or "").strip() or None
        options = resolve_options(selected_option_ids, self.known_options)
        ensure_unique_combination(frozenset(o.id for o in options), siblings)
        ensure_unique_sku(sku, siblings)

        variation = ProductVariation(
            product_id=product.id,
            user_id=product.user_id,
            name=name,
            sku=sku,
            price_adjustment=price_adjustment,
            stock_quantity=stock_quantity,
            is_active=True,
        )
        apply_final_price(variation, product.price)
        for option in options:
            variation.combinations.append(
                VariationCombination(
                    variation_option_id=option.id,
                    variation_option=option,
                    user_id=product.user_id,
                )
            )
        logger.debug("Composed variation '%s' for product %s with %d option(s)", name, product.id, len(options))
        return variation
