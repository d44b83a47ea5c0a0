from recipe_bot.cli import main

main()
