"""
Category vocabulary - IRS Schedule C categories used as classification targets
"""

from types import MappingProxyType

# Business expenses (Schedule C)
ADVERTISING = 'Advertising'
CAR_TRUCK_EXPENSES = 'Car and Truck Expenses'
COMMISSIONS_FEES = 'Commissions and Fees'
CONTRACT_LABOR = 'Contract Labor'
DEPLETION = 'Depletion'
DEPRECIATION = 'Depreciation and Section 179'
EMPLOYEE_BENEFIT_PROGRAMS = 'Employee Benefit Programs'
INSURANCE_OTHER = 'Insurance (Other than Health)'
INTEREST_MORTGAGE = 'Interest (Mortgage)'
INTEREST_OTHER = 'Interest (Other)'
LEGAL_PROFESSIONAL = 'Legal and Professional Services'
OFFICE_EXPENSES = 'Office Expenses'
PENSION_PROFIT_SHARING = 'Pension and Profit-Sharing Plans'
RENT_LEASE_VEHICLES = 'Rent or Lease (Vehicles, Machinery, Equipment)'
RENT_LEASE_OTHER = 'Rent or Lease (Other Business Property)'
REPAIRS_MAINTENANCE = 'Repairs and Maintenance'
SUPPLIES = 'Supplies (Not Inventory)'
TAXES_LICENSES = 'Taxes and Licenses'
TRAVEL = 'Travel'
MEALS_ENTERTAINMENT = 'Meals and Entertainment'
UTILITIES = 'Utilities'
WAGES = 'Wages (Less Employment Credits)'
OTHER_EXPENSES = 'Other Expenses'

# Business income
GROSS_RECEIPTS = 'Gross Receipts or Sales'
RETURNS_ALLOWANCES = 'Returns and Allowances'
OTHER_INCOME = 'Other Income'

# Payroll tracking
EMPLOYEE_WAGES = 'Employee Wages'
PAYROLL_TAXES = 'Payroll Taxes'
WORKER_COMPENSATION = 'Worker Compensation'
HEALTH_INSURANCE = 'Health Insurance'
RETIREMENT_CONTRIBUTIONS = 'Retirement Contributions'

# Personal
PERSONAL_EXPENSE = 'Personal Expense'
PERSONAL_TRANSFER = 'Personal Transfer'

UNCATEGORIZED = 'Uncategorized'

CATEGORY_GROUPS = MappingProxyType({
    'income': (GROSS_RECEIPTS, OTHER_INCOME),
    'deductions': (RETURNS_ALLOWANCES,),
    'operating_expenses': (ADVERTISING, OFFICE_EXPENSES, SUPPLIES, RENT_LEASE_OTHER,
                           UTILITIES, REPAIRS_MAINTENANCE),
    'vehicle_expenses': (CAR_TRUCK_EXPENSES, RENT_LEASE_VEHICLES),
    'professional_services': (LEGAL_PROFESSIONAL, COMMISSIONS_FEES, CONTRACT_LABOR),
    'employee_costs': (WAGES, EMPLOYEE_WAGES, PAYROLL_TAXES, EMPLOYEE_BENEFIT_PROGRAMS,
                       PENSION_PROFIT_SHARING, WORKER_COMPENSATION, HEALTH_INSURANCE,
                       RETIREMENT_CONTRIBUTIONS),
    'financial': (INTEREST_MORTGAGE, INTEREST_OTHER, INSURANCE_OTHER, TAXES_LICENSES),
    'travel_meals': (TRAVEL, MEALS_ENTERTAINMENT),
    'depreciation': (DEPRECIATION, DEPLETION),
    'personal': (PERSONAL_EXPENSE, PERSONAL_TRANSFER),
    'other': (OTHER_EXPENSES, UNCATEGORIZED),
})

ALL_CATEGORIES = tuple(c for group in CATEGORY_GROUPS.values() for c in group)

# Categories that only make sense for money coming in
INCOME_CATEGORIES = frozenset((GROSS_RECEIPTS, OTHER_INCOME, RETURNS_ALLOWANCES))

# Offered when nothing matched
COMMON_SUGGESTIONS = (OFFICE_EXPENSES, MEALS_ENTERTAINMENT, TRAVEL)


def is_known_category(category: str) -> bool:
    return category in ALL_CATEGORIES


def category_type(category: str) -> str:
    """'income' for income categories, 'expense' otherwise."""
    return 'income' if category in INCOME_CATEGORIES else 'expense'
