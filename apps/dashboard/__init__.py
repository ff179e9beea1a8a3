"""Dashboard summaries for admins and customers."""
