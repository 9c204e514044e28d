"""Lost Ark roster boards for Discord."""
