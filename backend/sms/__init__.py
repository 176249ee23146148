"""Student records service: students, their support tickets and the rules tying them together."""
