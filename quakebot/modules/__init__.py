"""Domain modules: progle results, advent leaderboard, mail relay."""
