from status_updater.jobs.worker import main

main()
