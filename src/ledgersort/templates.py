"""
Starter template strings for the ledgersort init command.
"""

STARTER_SETTINGS = '''# ledgersort settings
title: "{year} Ledger"

# Where the classified ledger is stored (relative to this project folder)
document: data/ledger.yaml

# Statement CSV files to import.
# Column names must match the header row of the export.
data_sources:
  # - name: Checking
  #   file: data/checking/          # every *.csv in this folder
  #   account: checking             # account id in the ledger
  #   account_name: Bank of America Checking
  #   account_type: CHECKING_ACCOUNT   # CHECKING_ACCOUNT, SAVINGS_ACCOUNT or CREDIT_CARD
  #   institution: Bank of America
  #   date_column: Date
  #   description_column: Description
  #   amount_column: Amount
  #
  # - name: Credit Card
  #   file: data/card-*.csv          # glob, ** recurses
  #   account: visa
  #   account_type: CREDIT_CARD
  #   date_column: Transaction Date
  #   date_format: "%m/%d/%Y"        # optional; guessed when omitted
  #   description_column: Description
  #   amount_column: Amount
  #   address_column: Address        # optional
  #   negate_amounts: true           # card exports list purchases as positive

# DEBUG, INFO, WARNING or ERROR
log_level: WARNING
'''

STARTER_CATEGORIES = '''# ledgersort categories
#
# Apply with: ledgersort rules --apply config/categories.yaml
#
# Entries are overlaid on the built-in categories: an existing id is updated,
# a new id is added. A category's type cannot be changed.
#
# Detector fields:
#   pattern    - regex that must match the WHOLE description
#                ("STARBUCKS.*" matches "STARBUCKS #123", not "MY STARBUCKS")
#   cents_min  - signed amount range in cents; 0 and 0 disables the check
#   cents_max
#   matches    - BALANCED categories only: regex for the other side of a
#                transfer (opposite amount, within 5 days)

categories:
  # - id: rent
  #   name: Rent
  #   type: EXPENSE                 # INCOME, EXPENSE, BALANCED or EXTERNAL
  #   color: "#5d4037"
  #   detectors:
  #     - id: rent-landlord
  #       vendor: Oak Street Apartments
  #       description: Monthly rent
  #       pattern: "(?i)OAK STREET APTS.*"
  #       cents_min: -250000
  #       cents_max: -150000
  #
  # - id: transfer
  #   name: Transfer
  #   type: BALANCED
  #   detectors:
  #     - id: transfer-savings
  #       description: Savings
  #       pattern: "(?i)TRANSFER TO SAV.*"
  #       matches: "(?i)TRANSFER FROM CHK.*"
'''

GITIGNORE = '''# ledgersort - keep statements and the ledger out of version control
data/
output/
'''
