"""EDINET XBRL tag spellings → canonical financial line items.

Two-layer architecture:
  Layer 1 — Canonical schema  (FinancialItem enum, one member per line item,
            each bound to the statement it belongs to)
  Layer 2 — Synonym mapping   (each item maps to an ordered list of tag
            spellings plus the row labels used by the CSV rendition)

The same concept shows up under different prefixes depending on taxonomy
year and accounting standard:
  - jppfs_cor   Japanese GAAP financial statements (current taxonomy)
  - jpigp_cor   IFRS filers (designated international accounting standards)
  - jpcrp_cor   "summary of business results" table at the front of the
                annual report; present even when the statements are not
  - ifrs-full   older IFRS filings
  - us-gaap     the handful of US-GAAP filers
Order matters: the first spelling with a value for the right context wins.
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple


# ═══════════════════════════════════════════════════════════════════════════
#  Statements and context kinds
# ═══════════════════════════════════════════════════════════════════════════

class Statement(str, Enum):
    BALANCE_SHEET = "balance_sheet"
    PROFIT_LOSS = "profit_loss"
    CASH_FLOW = "cash_flow"

    @property
    def context_kind(self) -> str:
        """Balance sheet facts are point-in-time; everything else is a period."""
        return "instant" if self is Statement.BALANCE_SHEET else "duration"


class FinancialItem(str, Enum):
    # Balance sheet
    CURRENT_ASSETS = "current_assets"
    NON_CURRENT_ASSETS = "non_current_assets"
    TOTAL_ASSETS = "total_assets"
    CURRENT_LIABILITIES = "current_liabilities"
    NON_CURRENT_LIABILITIES = "non_current_liabilities"
    TOTAL_LIABILITIES = "total_liabilities"
    NET_ASSETS = "net_assets"
    SHAREHOLDERS_EQUITY = "shareholders_equity"
    CASH_AND_DEPOSITS = "cash_and_deposits"
    TRADE_RECEIVABLES = "trade_receivables"
    INVENTORIES = "inventories"
    PROPERTY_PLANT_EQUIPMENT = "property_plant_equipment"
    # Profit and loss
    NET_SALES = "net_sales"
    COST_OF_SALES = "cost_of_sales"
    GROSS_PROFIT = "gross_profit"
    SGA_EXPENSES = "selling_general_admin_expenses"
    OPERATING_INCOME = "operating_income"
    NON_OPERATING_INCOME = "non_operating_income"
    NON_OPERATING_EXPENSES = "non_operating_expenses"
    ORDINARY_INCOME = "ordinary_income"
    NET_INCOME = "net_income"
    PROFIT_ATTRIBUTABLE_TO_OWNERS = "profit_attributable_to_owners"
    # Cash flow
    OPERATING_CASH_FLOW = "operating_cash_flow"
    INVESTING_CASH_FLOW = "investing_cash_flow"
    FINANCING_CASH_FLOW = "financing_cash_flow"

    @property
    def statement(self) -> Statement:
        return ITEM_STATEMENT[self]

    @property
    def context_kind(self) -> str:
        return self.statement.context_kind


_BALANCE_SHEET_ITEMS = (
    FinancialItem.CURRENT_ASSETS,
    FinancialItem.NON_CURRENT_ASSETS,
    FinancialItem.TOTAL_ASSETS,
    FinancialItem.CURRENT_LIABILITIES,
    FinancialItem.NON_CURRENT_LIABILITIES,
    FinancialItem.TOTAL_LIABILITIES,
    FinancialItem.NET_ASSETS,
    FinancialItem.SHAREHOLDERS_EQUITY,
    FinancialItem.CASH_AND_DEPOSITS,
    FinancialItem.TRADE_RECEIVABLES,
    FinancialItem.INVENTORIES,
    FinancialItem.PROPERTY_PLANT_EQUIPMENT,
)
_CASH_FLOW_ITEMS = (
    FinancialItem.OPERATING_CASH_FLOW,
    FinancialItem.INVESTING_CASH_FLOW,
    FinancialItem.FINANCING_CASH_FLOW,
)

ITEM_STATEMENT: dict[FinancialItem, Statement] = {
    item: (
        Statement.BALANCE_SHEET if item in _BALANCE_SHEET_ITEMS
        else Statement.CASH_FLOW if item in _CASH_FLOW_ITEMS
        else Statement.PROFIT_LOSS
    )
    for item in FinancialItem
}


# ═══════════════════════════════════════════════════════════════════════════
#  Tag entry
# ═══════════════════════════════════════════════════════════════════════════

class ItemMapping(NamedTuple):
    tags: tuple[str, ...]      # "prefix:LocalName", tried in order
    labels: tuple[str, ...]    # CSV 項目名 / English labels, tried in order


ITEM_MAPPINGS: dict[FinancialItem, ItemMapping] = {
    # ── Balance sheet ──────────────────────────────────────────────
    FinancialItem.CURRENT_ASSETS: ItemMapping(
        ("jppfs_cor:CurrentAssets", "jpigp_cor:CurrentAssetsIFRS",
         "ifrs-full:CurrentAssets", "us-gaap:AssetsCurrent"),
        ("流動資産合計", "流動資産", "Total current assets", "Current assets"),
    ),
    FinancialItem.NON_CURRENT_ASSETS: ItemMapping(
        ("jppfs_cor:NoncurrentAssets", "jppfs_cor:FixedAssets",
         "jpigp_cor:NonCurrentAssetsIFRS", "ifrs-full:NoncurrentAssets",
         "us-gaap:NoncurrentAssets"),
        ("固定資産合計", "非流動資産合計", "固定資産", "Total non-current assets",
         "Non-current assets"),
    ),
    FinancialItem.TOTAL_ASSETS: ItemMapping(
        ("jppfs_cor:Assets", "jpigp_cor:AssetsIFRS", "ifrs-full:Assets",
         "jpcrp_cor:TotalAssetsSummaryOfBusinessResults",
         "jpcrp_cor:TotalAssetsIFRSSummaryOfBusinessResults",
         "jpcrp_cor:TotalAssetsUSGAAPSummaryOfBusinessResults", "us-gaap:Assets"),
        ("資産合計", "総資産額", "資産の部合計", "Total assets", "Total Assets"),
    ),
    FinancialItem.CURRENT_LIABILITIES: ItemMapping(
        ("jppfs_cor:CurrentLiabilities", "jpigp_cor:TotalCurrentLiabilitiesIFRS",
         "ifrs-full:CurrentLiabilities", "us-gaap:LiabilitiesCurrent"),
        ("流動負債合計", "流動負債", "Total current liabilities", "Current liabilities"),
    ),
    FinancialItem.NON_CURRENT_LIABILITIES: ItemMapping(
        ("jppfs_cor:NoncurrentLiabilities", "jppfs_cor:FixedLiabilities",
         "jpigp_cor:NonCurrentLabilitiesIFRS", "jpigp_cor:NonCurrentLiabilitiesIFRS",
         "ifrs-full:NoncurrentLiabilities", "us-gaap:LiabilitiesNoncurrent"),
        ("固定負債合計", "非流動負債合計", "固定負債", "Total non-current liabilities",
         "Non-current liabilities"),
    ),
    FinancialItem.TOTAL_LIABILITIES: ItemMapping(
        ("jppfs_cor:Liabilities", "jpigp_cor:LiabilitiesIFRS",
         "ifrs-full:Liabilities", "us-gaap:Liabilities"),
        ("負債合計", "負債の部合計", "Total liabilities", "Total Liabilities"),
    ),
    FinancialItem.NET_ASSETS: ItemMapping(
        ("jppfs_cor:NetAssets", "jpigp_cor:EquityIFRS", "ifrs-full:Equity",
         "jpcrp_cor:NetAssetsSummaryOfBusinessResults",
         "jpcrp_cor:EquityIFRSSummaryOfBusinessResults",
         "us-gaap:StockholdersEquityIncludingPortionAttributableToNoncontrollingInterest"),
        ("純資産合計", "資本合計", "純資産額", "Total net assets", "Total equity"),
    ),
    FinancialItem.SHAREHOLDERS_EQUITY: ItemMapping(
        ("jppfs_cor:ShareholdersEquity",
         "jpigp_cor:EquityAttributableToOwnersOfParentIFRS",
         "ifrs-full:EquityAttributableToOwnersOfParent", "us-gaap:StockholdersEquity"),
        ("株主資本合計", "親会社の所有者に帰属する持分合計", "Total shareholders' equity",
         "Shareholders' equity"),
    ),
    FinancialItem.CASH_AND_DEPOSITS: ItemMapping(
        ("jppfs_cor:CashAndDeposits", "jpigp_cor:CashAndCashEquivalentsIFRS",
         "ifrs-full:CashAndCashEquivalents",
         "us-gaap:CashAndCashEquivalentsAtCarryingValue"),
        ("現金及び預金", "現金及び現金同等物", "Cash and deposits", "Cash and cash equivalents"),
    ),
    FinancialItem.TRADE_RECEIVABLES: ItemMapping(
        ("jppfs_cor:NotesAndAccountsReceivableTrade",
         "jppfs_cor:NotesAndAccountsReceivableTradeAndContractAssets",
         "jppfs_cor:AccountsReceivableTrade",
         "jpigp_cor:TradeAndOtherReceivablesCAIFRS",
         "ifrs-full:TradeAndOtherCurrentReceivables", "us-gaap:AccountsReceivableNetCurrent"),
        ("受取手形及び売掛金", "受取手形、売掛金及び契約資産", "売掛金", "営業債権及びその他の債権",
         "Notes and accounts receivable - trade", "Trade receivables"),
    ),
    FinancialItem.INVENTORIES: ItemMapping(
        ("jppfs_cor:Inventories", "jppfs_cor:MerchandiseAndFinishedGoods",
         "jpigp_cor:InventoriesCAIFRS", "ifrs-full:Inventories", "us-gaap:InventoryNet"),
        ("棚卸資産", "商品及び製品", "Inventories"),
    ),
    FinancialItem.PROPERTY_PLANT_EQUIPMENT: ItemMapping(
        ("jppfs_cor:PropertyPlantAndEquipment",
         "jpigp_cor:PropertyPlantAndEquipmentIFRS",
         "ifrs-full:PropertyPlantAndEquipment", "us-gaap:PropertyPlantAndEquipmentNet"),
        ("有形固定資産合計", "有形固定資産", "Property, plant and equipment",
         "Total property, plant and equipment"),
    ),

    # ── Profit and loss ────────────────────────────────────────────
    FinancialItem.NET_SALES: ItemMapping(
        ("jppfs_cor:NetSales", "jppfs_cor:OperatingRevenue1", "jppfs_cor:Revenue",
         "jpigp_cor:RevenueIFRS", "jpigp_cor:NetSalesIFRS", "ifrs-full:Revenue",
         "jpcrp_cor:NetSalesSummaryOfBusinessResults",
         "jpcrp_cor:RevenueIFRSSummaryOfBusinessResults",
         "jpcrp_cor:OperatingRevenue1SummaryOfBusinessResults", "us-gaap:Revenues"),
        ("売上高", "営業収益", "売上収益", "Net sales", "Revenue", "Net Sales"),
    ),
    FinancialItem.COST_OF_SALES: ItemMapping(
        ("jppfs_cor:CostOfSales", "jpigp_cor:CostOfSalesIFRS",
         "ifrs-full:CostOfSales", "us-gaap:CostOfRevenue"),
        ("売上原価", "Cost of sales"),
    ),
    FinancialItem.GROSS_PROFIT: ItemMapping(
        ("jppfs_cor:GrossProfit", "jpigp_cor:GrossProfitIFRS",
         "ifrs-full:GrossProfit", "us-gaap:GrossProfit"),
        ("売上総利益", "売上総利益又は売上総損失（△）", "Gross profit"),
    ),
    FinancialItem.SGA_EXPENSES: ItemMapping(
        ("jppfs_cor:SellingGeneralAndAdministrativeExpenses",
         "jpigp_cor:SellingGeneralAndAdministrativeExpensesIFRS",
         "ifrs-full:SellingGeneralAndAdministrativeExpense",
         "us-gaap:SellingGeneralAndAdministrativeExpense"),
        ("販売費及び一般管理費", "販売費及び一般管理費合計",
         "Selling, general and administrative expenses"),
    ),
    FinancialItem.OPERATING_INCOME: ItemMapping(
        ("jppfs_cor:OperatingIncome", "jpigp_cor:OperatingProfitLossIFRS",
         "ifrs-full:ProfitLossFromOperatingActivities", "us-gaap:OperatingIncomeLoss"),
        ("営業利益", "営業利益又は営業損失（△）", "営業利益（△は損失）",
         "Operating income", "Operating profit"),
    ),
    FinancialItem.NON_OPERATING_INCOME: ItemMapping(
        ("jppfs_cor:NonOperatingIncome",),
        ("営業外収益合計", "営業外収益", "Non-operating income"),
    ),
    FinancialItem.NON_OPERATING_EXPENSES: ItemMapping(
        ("jppfs_cor:NonOperatingExpenses",),
        ("営業外費用合計", "営業外費用", "Non-operating expenses"),
    ),
    FinancialItem.ORDINARY_INCOME: ItemMapping(
        ("jppfs_cor:OrdinaryIncome", "jpcrp_cor:OrdinaryIncomeLossSummaryOfBusinessResults",
         "jpigp_cor:ProfitLossBeforeTaxIFRS", "ifrs-full:ProfitLossBeforeTax",
         "us-gaap:IncomeLossFromContinuingOperationsBeforeIncomeTaxesExtraordinaryItemsNoncontrollingInterest"),
        ("経常利益", "経常利益又は経常損失（△）", "税引前利益", "Ordinary income",
         "Profit before tax"),
    ),
    FinancialItem.NET_INCOME: ItemMapping(
        ("jppfs_cor:ProfitLoss", "jppfs_cor:NetIncome", "jpigp_cor:ProfitLossIFRS",
         "ifrs-full:ProfitLoss", "jpcrp_cor:NetIncomeLossSummaryOfBusinessResults",
         "us-gaap:ProfitLoss", "us-gaap:NetIncomeLoss"),
        ("当期純利益", "当期純利益又は当期純損失（△）", "当期利益", "Net income", "Profit"),
    ),
    FinancialItem.PROFIT_ATTRIBUTABLE_TO_OWNERS: ItemMapping(
        ("jppfs_cor:ProfitLossAttributableToOwnersOfParent",
         "jpigp_cor:ProfitLossAttributableToOwnersOfParentIFRS",
         "ifrs-full:ProfitLossAttributableToOwnersOfParent",
         "jpcrp_cor:ProfitLossAttributableToOwnersOfParentSummaryOfBusinessResults",
         "us-gaap:NetIncomeLoss"),
        ("親会社株主に帰属する当期純利益", "親会社の所有者に帰属する当期利益",
         "Profit attributable to owners of parent"),
    ),

    # ── Cash flow ──────────────────────────────────────────────────
    FinancialItem.OPERATING_CASH_FLOW: ItemMapping(
        ("jppfs_cor:NetCashProvidedByUsedInOperatingActivities",
         "jpigp_cor:NetCashProvidedByUsedInOperatingActivitiesIFRS",
         "ifrs-full:CashFlowsFromUsedInOperatingActivities",
         "jpcrp_cor:NetCashProvidedByUsedInOperatingActivitiesSummaryOfBusinessResults",
         "us-gaap:NetCashProvidedByUsedInOperatingActivities"),
        ("営業活動によるキャッシュ・フロー", "Net cash provided by (used in) operating activities",
         "Cash flows from operating activities"),
    ),
    FinancialItem.INVESTING_CASH_FLOW: ItemMapping(
        ("jppfs_cor:NetCashProvidedByUsedInInvestmentActivities",
         "jppfs_cor:NetCashProvidedByUsedInInvestingActivities",
         "jpigp_cor:NetCashProvidedByUsedInInvestingActivitiesIFRS",
         "ifrs-full:CashFlowsFromUsedInInvestingActivities",
         "jpcrp_cor:NetCashProvidedByUsedInInvestingActivitiesSummaryOfBusinessResults",
         "us-gaap:NetCashProvidedByUsedInInvestingActivities"),
        ("投資活動によるキャッシュ・フロー", "Net cash provided by (used in) investing activities",
         "Cash flows from investing activities"),
    ),
    FinancialItem.FINANCING_CASH_FLOW: ItemMapping(
        ("jppfs_cor:NetCashProvidedByUsedInFinancingActivities",
         "jpigp_cor:NetCashProvidedByUsedInFinancingActivitiesIFRS",
         "ifrs-full:CashFlowsFromUsedInFinancingActivities",
         "jpcrp_cor:NetCashProvidedByUsedInFinancingActivitiesSummaryOfBusinessResults",
         "us-gaap:NetCashProvidedByUsedInFinancingActivities"),
        ("財務活動によるキャッシュ・フロー", "Net cash provided by (used in) financing activities",
         "Cash flows from financing activities"),
    ),
}


def tag_spellings(item: FinancialItem) -> tuple[str, ...]:
    """Ordered tag spellings for one item."""
    return ITEM_MAPPINGS[item].tags


def row_labels(item: FinancialItem) -> tuple[str, ...]:
    return ITEM_MAPPINGS[item].labels


def items_for(statement: Statement) -> list[FinancialItem]:
    return [item for item in FinancialItem if item.statement is statement]


# ═══════════════════════════════════════════════════════════════════════════
#  Context markers
# ═══════════════════════════════════════════════════════════════════════════

# Context ids EDINET uses for the period being reported
CURRENT_PERIOD_MARKERS: tuple[str, ...] = ("CurrentYear", "CurrentQuarter", "CurrentYTD", "Interim")

DEFAULT_INSTANT_CONTEXT = "CurrentYearInstant"
DEFAULT_DURATION_CONTEXT = "CurrentYearDuration"
