from nq_server.core.cli import main

if __name__ == "__main__":
    main()
