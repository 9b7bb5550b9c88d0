# ABOUTME: Story Stalker - a personal book-tracking library with JSON backup and restore.
# ABOUTME: Package root; public entry points live in the db, backup, and cli subpackages.
