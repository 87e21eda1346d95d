"""AMS portal: attendance, leave and payroll tracking backend."""
