"""Category registry - static metadata consumed by the classifier and savings engines"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from save_invest.domain.models import ExpenseCategory


@dataclass(frozen=True)
class CategoryInfo:
    category: ExpenseCategory
    typically_necessary: bool
    high_amount_threshold: float
    icon: str


CATEGORY_REGISTRY: Dict[ExpenseCategory, CategoryInfo] = {
    ExpenseCategory.FOOD: CategoryInfo(ExpenseCategory.FOOD, True, 50.0, "fork.knife"),
    ExpenseCategory.HOUSING: CategoryInfo(ExpenseCategory.HOUSING, True, 3000.0, "house"),
    ExpenseCategory.TRANSPORTATION: CategoryInfo(ExpenseCategory.TRANSPORTATION, True, 100.0, "car"),
    ExpenseCategory.UTILITIES: CategoryInfo(ExpenseCategory.UTILITIES, True, 200.0, "bolt"),
    ExpenseCategory.HEALTHCARE: CategoryInfo(ExpenseCategory.HEALTHCARE, True, 300.0, "heart"),
    ExpenseCategory.EDUCATION: CategoryInfo(ExpenseCategory.EDUCATION, True, 500.0, "book"),
    ExpenseCategory.SHOPPING: CategoryInfo(ExpenseCategory.SHOPPING, False, 100.0, "bag"),
    ExpenseCategory.ENTERTAINMENT: CategoryInfo(ExpenseCategory.ENTERTAINMENT, False, 75.0, "film"),
    ExpenseCategory.TRAVEL: CategoryInfo(ExpenseCategory.TRAVEL, False, 300.0, "airplane"),
    ExpenseCategory.OTHER: CategoryInfo(ExpenseCategory.OTHER, False, 100.0, "ellipsis.circle"),
}

# Ordered so multi-word keywords win over their single-word prefixes
CATEGORY_KEYWORDS: Tuple[Tuple[str, ExpenseCategory], ...] = (
    ("gas station", ExpenseCategory.TRANSPORTATION),
    ("rent", ExpenseCategory.HOUSING),
    ("mortgage", ExpenseCategory.HOUSING),
    ("apartment", ExpenseCategory.HOUSING),
    ("grocery", ExpenseCategory.FOOD),
    ("restaurant", ExpenseCategory.FOOD),
    ("dinner", ExpenseCategory.FOOD),
    ("lunch", ExpenseCategory.FOOD),
    ("coffee", ExpenseCategory.FOOD),
    ("utilities", ExpenseCategory.UTILITIES),
    ("electric", ExpenseCategory.UTILITIES),
    ("water", ExpenseCategory.UTILITIES),
    ("gas", ExpenseCategory.UTILITIES),
    ("internet", ExpenseCategory.UTILITIES),
    ("phone", ExpenseCategory.UTILITIES),
    ("uber", ExpenseCategory.TRANSPORTATION),
    ("lyft", ExpenseCategory.TRANSPORTATION),
    ("taxi", ExpenseCategory.TRANSPORTATION),
    ("bus", ExpenseCategory.TRANSPORTATION),
    ("train", ExpenseCategory.TRANSPORTATION),
    ("fuel", ExpenseCategory.TRANSPORTATION),
    ("doctor", ExpenseCategory.HEALTHCARE),
    ("medical", ExpenseCategory.HEALTHCARE),
    ("medicine", ExpenseCategory.HEALTHCARE),
    ("hospital", ExpenseCategory.HEALTHCARE),
    ("movie", ExpenseCategory.ENTERTAINMENT),
    ("concert", ExpenseCategory.ENTERTAINMENT),
    ("netflix", ExpenseCategory.ENTERTAINMENT),
    ("spotify", ExpenseCategory.ENTERTAINMENT),
    ("clothes", ExpenseCategory.SHOPPING),
    ("shoes", ExpenseCategory.SHOPPING),
    ("amazon", ExpenseCategory.SHOPPING),
    ("tuition", ExpenseCategory.EDUCATION),
    ("book", ExpenseCategory.EDUCATION),
    ("course", ExpenseCategory.EDUCATION),
    ("vacation", ExpenseCategory.TRAVEL),
    ("hotel", ExpenseCategory.TRAVEL),
    ("flight", ExpenseCategory.TRAVEL),
    ("airbnb", ExpenseCategory.TRAVEL),
)


def get_category_info(category) -> Optional[CategoryInfo]:
    """Registry entry for a category (enum or raw string); None if unknown"""
    parsed = ExpenseCategory.parse(category)
    if parsed is None:
        return None
    return CATEGORY_REGISTRY[parsed]


def is_typically_necessary(category) -> bool:
    """Default necessity; unknown categories are discretionary"""
    info = get_category_info(category)
    return info.typically_necessary if info else False


def suggest_category(title: str, amount: float = 0.0) -> ExpenseCategory:
    """
    Guess a category for a free-text title.

    The first keyword contained in the lowercased title wins. Without a keyword
    match the amount decides: > 1000 housing, > 200 shopping, > 50 food,
    anything else is "other".
    """
    normalized = (title or "").strip().lower()
    for keyword, category in CATEGORY_KEYWORDS:
        if keyword in normalized:
            return category

    if amount > 1000:
        return ExpenseCategory.HOUSING
    elif amount > 200:
        return ExpenseCategory.SHOPPING
    elif amount > 50:
        return ExpenseCategory.FOOD
    return ExpenseCategory.OTHER
