"""Partners domain - directory, leaderboard and partner detail pages"""
