"""Text normalisation, field matching and the confidence-tiered decision policy."""
