from pdf_vault.cli import main

main()
