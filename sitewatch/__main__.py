from sitewatch.main import main

main()
