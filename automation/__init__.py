"""CRM automation service: workflow rules triggered by record changes."""
