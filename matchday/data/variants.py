"""Sport variant descriptors.

A variant is plain configuration: the pages to visit, the selectors to read, and
whether the sport publishes an injured/suspended list. One pipeline serves every
variant.
"""

from dataclasses import dataclass
from typing import Dict, Optional

BASE_URL = "https://www.bilyoner.com"


@dataclass(frozen=True)
class HistorySelectors:
    """Selectors for the comparison page"""
    home_table: str = ".quick-statistics__table:nth-child(1) .quick-statistics__table__body"
    away_table: str = ".quick-statistics__table:nth-child(2) .quick-statistics__table__body"
    expand_button: str = ".quick-statistics__table__body__row__open-button"
    row: str = ".team-against-row"
    date: str = ".team-against-row__date"
    home_label: str = ".team-against-row__home span"
    away_label: str = ".team-against-row__away span"
    score: str = ".icon-score"
    side_half_time: str = ".team-against-row__score--half-time"
    between_half_time: str = ".team-against-row__half-time"
    between_tab: str = 'label[for="tab1_1"]'
    between_rows: str = ".quick-statistics__table--last-5-match .quick-statistics__table__body .team-against-row"


@dataclass(frozen=True)
class SportVariant:
    """Tagged configuration for one sport"""
    key: str
    label: str
    listing_url: str
    detail_url_template: str
    comparison_url_template: str
    roster_url_template: Optional[str] = None
    expected_host: str = "bilyoner.com"
    list_container: str = ".sportsbookList"
    fixture_row: str = ".events-container__item"
    fixture_teams: str = ".event-row-prematch__cells__teams"
    venue: str = ".match-detail__match-info__list__item:last-child .match-detail__match-info__list__item__text"
    roster_heading: str = ".injured-banned__content__title"
    roster_table_class: str = "injured-banned__table"
    roster_row: str = ".injured-banned__table__body__row"
    roster_name: str = ".injured-banned__table__body__row__columns__column strong"
    roster_status: str = ".injured-banned__table__body__row__columns__column span"
    all_available_message: str = "Tüm oyuncular maç için hazır."
    history: HistorySelectors = HistorySelectors()

    @property
    def roster_aware(self) -> bool:
        return self.roster_url_template is not None

    def detail_url(self, fixture_id: str) -> str:
        return self.detail_url_template.format(fixture_id=fixture_id)

    def roster_url(self, fixture_id: str) -> Optional[str]:
        if self.roster_url_template is None:
            return None
        return self.roster_url_template.format(fixture_id=fixture_id)

    def comparison_url(self, fixture_id: str) -> str:
        return self.comparison_url_template.format(fixture_id=fixture_id)


FOOTBALL = SportVariant(
    key="football",
    label="Football Match",
    listing_url=f"{BASE_URL}/iddaa",
    detail_url_template=f"{BASE_URL}/mac-karti/futbol/{{fixture_id}}/detay",
    comparison_url_template=f"{BASE_URL}/mac-karti/futbol/{{fixture_id}}/karsilastirma",
    roster_url_template=f"{BASE_URL}/mac-karti/futbol/{{fixture_id}}/sakat-cezali",
)

BASKETBALL = SportVariant(
    key="basketball",
    label="Basketball Match",
    listing_url=f"{BASE_URL}/iddaa/basketbol",
    detail_url_template=f"{BASE_URL}/mac-karti/basketbol/{{fixture_id}}/detay",
    comparison_url_template=f"{BASE_URL}/mac-karti/basketbol/{{fixture_id}}/karsilastirma",
)

VARIANTS: Dict[str, SportVariant] = {
    FOOTBALL.key: FOOTBALL,
    BASKETBALL.key: BASKETBALL,
}


def get_variant(name: str) -> SportVariant:
    """Resolve a sport variant by key"""
    try:
        return VARIANTS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown sport variant: {name}. Must be one of {', '.join(sorted(VARIANTS))}"
        ) from None
