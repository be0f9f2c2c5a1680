"""
Built-in categories and detectors shipped with ledgersort.

Loaded by Categories.from_builtin(). A saved document only stores the
categories and detectors that differ from these.
"""

BUILTIN_CATEGORIES = r'''
categories:
  - id: salary
    name: Salary
    type: INCOME
    color: "#2e7d32"
    detectors:
      - id: salary-payroll
        vendor: ""
        description: Payroll
        pattern: "(?i).*(PAYROLL|DIRECT DEP).*"
        cents_min: 0
        cents_max: 0

  - id: interest
    name: Interest
    type: INCOME
    color: "#66bb6a"
    detectors:
      - id: interest-paid
        vendor: ""
        description: Interest paid
        pattern: "(?i)INTEREST (PAID|PAYMENT|EARNED).*"
        cents_min: 0
        cents_max: 0

  - id: groceries
    name: Groceries
    type: EXPENSE
    color: "#ef6c00"
    detectors:
      - id: groceries-whole-foods
        vendor: Whole Foods
        description: ""
        pattern: "(?i)(WHOLEFDS|WHOLE FOODS).*"
        cents_min: 0
        cents_max: 0
      - id: groceries-trader-joes
        vendor: Trader Joe's
        description: ""
        pattern: "(?i)TRADER JOE.*"
        cents_min: 0
        cents_max: 0

  - id: dining
    name: Dining
    type: EXPENSE
    color: "#d84315"
    detectors:
      - id: dining-starbucks
        vendor: Starbucks
        description: Coffee
        pattern: "(?i)STARBUCKS.*"
        cents_min: 0
        cents_max: 0

  - id: utilities
    name: Utilities
    type: EXPENSE
    color: "#6d4c41"
    detectors:
      - id: utilities-electric
        vendor: ""
        description: Electricity
        pattern: "(?i).*(ELECTRIC|EDISON|POWER CO).*"
        cents_min: 0
        cents_max: 0

  - id: fees
    name: Bank Fees
    type: EXPENSE
    color: "#8e24aa"
    detectors:
      - id: fees-overdraft
        vendor: ""
        description: Overdraft fee
        pattern: "(?i).*OVERDRAFT.*FEE.*"
        cents_min: 0
        cents_max: 0

  - id: cash
    name: Cash
    type: EXTERNAL
    color: "#546e7a"
    detectors:
      - id: cash-atm
        vendor: ""
        description: ATM withdrawal
        pattern: "(?i).*ATM.*(WITHDRAWAL|WITHDRWL).*"
        cents_min: 0
        cents_max: 0

  - id: credit-card-payment
    name: Credit Card Payment
    type: BALANCED
    color: "#1565c0"
    detectors:
      - id: credit-card-payment-online
        vendor: ""
        description: Online payment
        pattern: "(?i).*(CARD|CRD) (PAYMENT|PMT|EPAY).*"
        cents_min: 0
        cents_max: 0
        matches: "(?i).*(PAYMENT|PMT).*(THANK YOU|RECEIVED).*"

  - id: transfer
    name: Transfer
    type: BALANCED
    color: "#00838f"
    detectors:
      - id: transfer-online
        vendor: ""
        description: Online transfer
        pattern: "(?i).*TRANSFER TO .*"
        cents_min: 0
        cents_max: 0
        matches: "(?i).*TRANSFER FROM .*"
'''
