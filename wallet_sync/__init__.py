"""Edenred to BudgetBakers Wallet transaction sync service."""
